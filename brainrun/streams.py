from typing import BinaryIO, Optional

from brainrun.errors import BrainrunError
from brainrun.types import ErrorVal


# Bytes skipped before a read when whitespace skipping is on
WHITESPACE = b' \t\n\v\f\r'

EOF_POLICIES = ('unchanged', 'zero', 'max')


class ByteInput:
    """Blocking one-byte-at-a-time reader for Input instructions.

    `eof` decides what a cell becomes when the source is exhausted:
    'unchanged' keeps its value, 'zero' stores 0 and 'max' stores 255.
    With `skip_whitespace` the reader discards whitespace bytes before
    each read, the way formatted character extraction does.
    """
    def __init__(self, stream: BinaryIO, eof: str = 'unchanged', skip_whitespace: bool = False):
        if eof not in EOF_POLICIES:
            raise BrainrunError(ErrorVal('ValueError', f'unknown eof policy {eof!r}; expected one of {", ".join(EOF_POLICIES)}'))
        self.stream = stream
        self.eof = eof
        self.skip_whitespace = skip_whitespace
        self.exhausted = False

    def read_byte(self) -> Optional[int]:
        if self.exhausted:
            return None
        while True:
            try:
                data = self.stream.read(1)
            except OSError as e:
                raise BrainrunError(ErrorVal('IOError', f'error reading input: {e}'))
            if not data:
                self.exhausted = True
                return None
            if self.skip_whitespace and data in WHITESPACE:
                continue
            return data[0]

    def read_cell(self, current: int) -> int:
        value = self.read_byte()
        if value is not None:
            return value
        if self.eof == 'zero':
            return 0
        if self.eof == 'max':
            return 255
        return current


class ByteOutput:
    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write(self, value: int, count: int = 1):
        try:
            self.stream.write(bytes([value]) * count)
            self.stream.flush()
        except OSError as e:
            raise BrainrunError(ErrorVal('IOError', f'error writing output: {e}'))
