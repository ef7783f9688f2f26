from brainrun.errors import BrainrunError
from brainrun.types import ErrorVal, wrap_cell


class Tape:
    """Unbounded row of byte cells with a single cursor.

    The tape starts with one zero cell and grows to the right whenever the
    cursor moves past the materialized cells. It never shrinks, so values
    left behind the cursor survive moving away and back.
    """
    def __init__(self):
        self.cells = bytearray(1)
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.cells)

    def advance(self, n: int = 1):
        self.cursor += n
        if self.cursor >= len(self.cells):
            self.cells.extend(bytes(self.cursor + 1 - len(self.cells)))

    def retreat(self, n: int = 1):
        if n > self.cursor:
            raise BrainrunError(ErrorVal(
                'TapeError',
                f'cannot move {n} cell(s) left of cell {self.cursor}; the tape has no negative addresses',
            ))
        self.cursor -= n

    def read(self) -> int:
        return self.cells[self.cursor]

    def write(self, value: int):
        self.cells[self.cursor] = wrap_cell(value)

    def snapshot(self) -> bytes:
        return bytes(self.cells)

    def __repr__(self) -> str:
        return f"Tape(cursor={self.cursor}, size={len(self.cells)})"
