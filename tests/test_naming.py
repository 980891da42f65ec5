import pytest

from kitgen.naming import camel_case, english_number, low_camel_name


@pytest.mark.parametrize(
    "i,want",
    [
        (0, "Zero"), (1, "One"), (2, "Two"), (3, "Three"), (4, "Four"),
        (5, "Five"), (6, "Six"), (7, "Seven"), (8, "Eight"), (9, "Nine"),
        (11, "OneOne"), (22, "TwoTwo"), (23, "TwoThree"),
    ],
)
def test_english_number(i, want):
    assert english_number(i) == want


@pytest.mark.parametrize(
    "name,want",
    [
        ("what", "what"),
        ("example_one", "exampleOne"),
        ("another_example_case", "anotherExampleCase"),
        ("_leading_camel", "xLeadingCamel"),
        ("_a", "xA"),
        ("a", "a"),
    ],
)
def test_low_camel_name(name, want):
    assert low_camel_name(name) == want


@pytest.mark.parametrize(
    "name,want",
    [("client_id", "ClientId"), ("orig_name", "OrigName"), ("a", "A"), ("", "")],
)
def test_camel_case(name, want):
    assert camel_case(name) == want