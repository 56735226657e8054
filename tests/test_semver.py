import pytest

from ddnskit.semver import parse_version


@pytest.mark.parametrize(
    "text",
    [
        "1.2.3",
        "1.2.3+test.01",
        "1.2.3-alpha.-1",
        "v1.2.3",
        "1.0",
        "v1.0",
        "1",
        "v1",
        "1.2-5",
        "v1.2-5",
        "1.2-beta.5",
        "v1.2-beta.5",
        "1.2.0-x.Y.0+metadata",
        "v1.2.0-x.Y.0+metadata",
        "1.2.0-x.Y.0+metadata-width-hyphen",
        "v1.2.0-x.Y.0+metadata-width-hyphen",
        "1.2.3-rc1-with-hyphen",
        "v1.2.3-rc1-with-hyphen",
        "1.2.2147483648",
        "1.2147483648.3",
        "2147483648.3.0",
        "20221209-update-renovatejson-v4",
    ],
)
def test_valid_versions_parse(text):
    version = parse_version(text)
    assert version.major >= 0
    assert str(version).count(".") == 2


@pytest.mark.parametrize(
    "text",
    [
        "1.2.beta",
        "v1.2.beta",
        "foo",
        "\n1.2",
        "\nv1.2",
        "1.2.3.4",
        "v1.2.3.4",
        "12.3.4.1234",
        "12.23.4.1234",
        "12.3.34.1234",
    ],
)
def test_invalid_versions_raise(text):
    with pytest.raises(ValueError):
        parse_version(text)


def test_segment_overflow_raises():
    with pytest.raises(ValueError):
        parse_version("18446744073709551616.0.0")


def test_parts():
    version = parse_version("1.2.3")
    assert (version.major, version.minor, version.patch) == (1, 2, 3)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.2.3", "1.2.3"),
        ("v1.2.3", "1.2.3"),
        ("1.0", "1.0.0"),
        ("v1.0", "1.0.0"),
        ("1", "1.0.0"),
        ("v1", "1.0.0"),
    ],
)
def test_coerce_string(text, expected):
    assert str(parse_version(text)) == expected


@pytest.mark.parametrize(
    "left, right, expected",
    [
        ("1.2.3", "1.5.1", -1),
        ("2.2.3", "1.5.1", 1),
        ("2.2.3", "2.2.2", 1),
    ],
)
def test_compare(left, right, expected):
    assert parse_version(left).compare(parse_version(right)) == expected


@pytest.mark.parametrize(
    "left, right, expected",
    [
        ("1.2.3", "1.5.1", False),
        ("2.2.3", "1.5.1", True),
        ("3.2-beta", "3.2-beta", False),
        ("3.2.0-beta.1", "3.2.0-beta.5", False),
        ("7.43.0-SNAPSHOT.99", "7.43.0-SNAPSHOT.103", False),
        ("7.43.0-SNAPSHOT.99", "7.43.0-SNAPSHOT.BAR", False),
    ],
)
def test_greater_than(left, right, expected):
    assert parse_version(left).greater_than(parse_version(right)) is expected


@pytest.mark.parametrize(
    "left, right, expected",
    [
        ("1.2.3", "1.5.1", False),
        ("2.2.3", "1.5.1", True),
        ("3.2-beta", "3.2-beta", True),
        ("3.2-beta.4", "3.2-beta.2", True),
        ("7.43.0-SNAPSHOT.FOO", "7.43.0-SNAPSHOT.103", True),
    ],
)
def test_greater_than_or_equal(left, right, expected):
    assert parse_version(left).greater_than_or_equal(parse_version(right)) is expected


def test_ordering_matches_compare():
    versions = [parse_version(v) for v in ["2.0", "1.5.1", "1.2.3", "v1"]]
    assert [str(v) for v in sorted(versions)] == ["1.0.0", "1.2.3", "1.5.1", "2.0.0"]