import io

from rollping.hosts import parse_hosts, read_hosts


def test_read_hosts_trims_and_skips_blank_lines():
    stream = io.StringIO("8.8.8.8\n\n  1.1.1.1  \n\t\nexample.com\n")

    assert read_hosts(stream) == ["8.8.8.8", "1.1.1.1", "example.com"]


def test_duplicates_kept_by_default():
    assert parse_hosts(["a", "b", "a"]) == ["a", "b", "a"]


def test_dedupe_keeps_first_occurrence_order():
    assert parse_hosts(["b", "a", "b", "c", "a"], dedupe=True) == ["b", "a", "c"]


def test_empty_input():
    assert read_hosts(io.StringIO("")) == []
