from __future__ import annotations

import pytest

from sim6502.programs import PROGRAMS, WEEKDAY, get_program


def test_catalog_order() -> None:
    assert [program.name for program in PROGRAMS] == [
        "ldxyi_and_dec",
        "countdown_y_from_10",
        "inc_stopif_greatereq",
        "compare",
        "add_two_16_bit_numbers",
        "fibonacci",
        "sieve_of_eratosthenes",
        "weekday",
    ]


def test_lookup_by_index_and_name() -> None:
    assert get_program(7) is WEEKDAY
    assert get_program("weekday") is WEEKDAY


@pytest.mark.parametrize("key", [-1, len(PROGRAMS), "nope"])
def test_unknown_program_raises(key) -> None:
    with pytest.raises(KeyError):
        get_program(key)


@pytest.mark.parametrize("program", PROGRAMS, ids=lambda program: program.name)
def test_stop_address_follows_main_snippet(program) -> None:
    main = next(snippet for snippet in program.snippets if snippet.name == "main")
    assert main.address == program.entry_point
    assert program.stop_address == main.end + 1
