import io

import pytest
from brainrun.errors import BrainrunError
from brainrun.interpreter import Interpreter, run_program
from brainrun.parser import parse_program


def run(source, data=b'', **options):
    stdout = io.BytesIO()
    tape = run_program(source, stdin=io.BytesIO(data), stdout=stdout, **options)
    return stdout.getvalue(), tape


def test_multiply_loop_prints_letter_a():
    out, tape = run('++++++++[>++++++++<-]>+.')
    assert out == b'A'
    assert tape.snapshot() == bytes([0, 65])


def test_input_passes_through_to_output():
    out, _ = run(',.', b'\x41')
    assert out == b'\x41'


def test_comment_only_program_halts_immediately():
    interp = Interpreter(stdin=io.BytesIO(), stdout=io.BytesIO())
    tape = interp.run(parse_program('no operators here at all\n'))
    assert interp.steps == 0
    assert tape.cursor == 0
    assert interp.stdout.getvalue() == b''


def test_increment_wraps_at_255():
    _, tape = run('-')
    assert tape.read() == 255
    _, tape = run('-+')
    assert tape.read() == 0
    _, tape = run('+' * 256)
    assert tape.read() == 0


def test_pointer_round_trip_keeps_values():
    _, tape = run('+++>>>>>+<<<<<')
    assert tape.cursor == 0
    assert tape.read() == 3
    assert len(tape) == 6


def test_output_count_repeats_byte():
    out, _ = run('+' * 66 + '...')
    assert out == b'BBB'


def test_input_count_keeps_last_byte():
    out, _ = run(',,,.', b'xyz')
    assert out == b'z'


def test_input_is_raw_by_default():
    out, _ = run(',.', b' ')
    assert out == b' '


def test_input_can_skip_whitespace():
    out, _ = run(',.', b' \n q', skip_whitespace=True)
    assert out == b'q'


def test_end_of_input_leaves_cell_unchanged_by_default():
    out, _ = run('+++,.', b'')
    assert out == b'\x03'


def test_end_of_input_zero_policy():
    out, _ = run(',[.,]', b'cat', eof='zero')
    assert out == b'cat'


def test_skipped_loop_body_never_runs():
    out, _ = run('[.+.]+.')
    assert out == b'\x01'


def test_nested_loops():
    # 3 * 4 * 5 accumulated into cell 2
    _, tape = run('+++[>++++[>+++++<-]<-]')
    assert tape.snapshot() == bytes([0, 0, 60])


def test_loop_close_returns_to_head_for_retest():
    interp = Interpreter(stdin=io.BytesIO(), stdout=io.BytesIO())
    interp.run(parse_program('++[-]'))
    # ++, then [ - ] twice, then the final [ test that exits
    assert interp.steps == 1 + 3 * 2 + 1


def test_non_terminating_loop_hits_step_limit():
    with pytest.raises(BrainrunError) as info:
        run('+[]', max_steps=10_000)
    assert info.value.name == 'StepLimitError'


def test_step_limit_not_hit_by_finishing_program():
    out, _ = run('++++++++[>++++++++<-]>+.', max_steps=1_000)
    assert out == b'A'


def test_move_left_of_origin_is_reported_with_position():
    with pytest.raises(BrainrunError) as info:
        run('>+<<')
    assert info.value.name == 'TapeError'
    assert info.value.err.position == 2


def test_strict_mode_rejects_unbalanced_program_before_output():
    stdout = io.BytesIO()
    with pytest.raises(BrainrunError) as info:
        run_program('+.]', stdin=io.BytesIO(), stdout=stdout)
    assert info.value.name == 'BracketError'
    assert stdout.getvalue() == b''


def test_lenient_mode_runs_until_unmatched_close():
    stdout = io.BytesIO()
    with pytest.raises(BrainrunError) as info:
        run_program('+.]', stdin=io.BytesIO(), stdout=stdout, strict=False)
    assert info.value.name == 'BracketError'
    assert info.value.err.position == 2
    assert stdout.getvalue() == b'\x01'


def test_lenient_mode_unmatched_open_on_zero_cell():
    with pytest.raises(BrainrunError) as info:
        run('.[', strict=False)
    assert info.value.name == 'BracketError'
    assert info.value.err.position == 1


def test_lenient_mode_unmatched_open_is_harmless_on_nonzero_cell():
    # the body runs off the end of the program before the bracket matters
    out, _ = run('+[.', strict=False)
    assert out == b'\x01'


def test_lenient_and_strict_modes_agree_on_balanced_programs():
    source = '>+++++[<+++++++++++++>-]<[>+>+<<-]>>[<<+>>-]<<.>.'
    strict_out, strict_tape = run(source)
    lenient_out, lenient_tape = run(source, strict=False)
    assert strict_out == lenient_out == b'AA'
    assert strict_tape.snapshot() == lenient_tape.snapshot()


def test_negative_step_limit_is_rejected():
    with pytest.raises(BrainrunError) as info:
        Interpreter(max_steps=-1)
    assert info.value.name == 'ValueError'


def test_default_streams_are_process_stdio(monkeypatch, capsysbinary):
    monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(b'hi')))
    run_program(',.,.')
    assert capsysbinary.readouterr().out == b'hi'


def test_debug_file_traces_execution(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(debug_level=3, debug_file=str(debug_file), stdin=io.BytesIO(), stdout=io.BytesIO())
    interp.run(parse_program('+[-]'))
    lines = debug_file.read_text().splitlines()
    assert lines[0] == 'run 4 instructions (strict)'
    assert 'enter loop 1 (depth 1)' in lines
    assert 'skip loop 1 -> 3' in lines
    assert lines[-1] == 'halted after 5 steps; cursor 0, tape size 1'


def test_unknown_eof_policy_is_rejected_at_construction():
    with pytest.raises(BrainrunError) as info:
        Interpreter(eof='bogus')
    assert info.value.name == 'ValueError'
    assert 'bogus' in str(info.value)


def test_second_run_appends_to_debug_file(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(debug_level=1, debug_file=str(debug_file), stdin=io.BytesIO(), stdout=io.BytesIO())
    interp.run(parse_program('+'))
    interp.run(parse_program('++>'))
    assert debug_file.read_text().splitlines() == [
        'run 1 instructions (strict)',
        'halted after 1 steps; cursor 0, tape size 1',
        'run 2 instructions (strict)',
        'halted after 2 steps; cursor 1, tape size 2',
    ]


def test_each_run_starts_from_a_fresh_tape():
    interp = Interpreter(stdin=io.BytesIO(), stdout=io.BytesIO())
    interp.run(parse_program('+++>'))
    tape = interp.run(parse_program('+'))
    assert tape.snapshot() == b'\x01'
