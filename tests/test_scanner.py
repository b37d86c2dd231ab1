"""
Brief: Tests for loglens.scan.scanner.ParallelScanner.

Inputs:
  - None

Outputs:
  - None
"""

import random

import pytest

from loglens.cache import ResolutionCache
from loglens.counter import HitCounter
from loglens.models import Chunk, FieldLayout
from loglens.scan import ParallelScanner, split_file

from conftest import W3C_COUNTS, FakeResolver


def _scan(path, chunk_size, layout=None, cache=None, workers=4):
    counter = HitCounter()
    scanner = ParallelScanner(counter, cache=cache, layout=layout, max_workers=workers)
    stats = scanner.scan(split_file(path, chunk_size))
    return counter, stats


def test_counts_multi_block_log(w3c_log):
    """
    Brief: Counts follow each block's #Fields header and skip short lines.

    Inputs:
      - w3c_log: two blocks with different c-ip positions

    Outputs:
      - None: Asserts counts and per-run line stats
    """
    counter, stats = _scan(w3c_log, 4096)

    assert dict(counter.snapshot()) == W3C_COUNTS
    assert sum(s.lines for s in stats) == 7
    assert sum(s.counted for s in stats) == 6
    assert sum(s.skipped for s in stats) == 1


@pytest.mark.parametrize("chunk_size", [1, 3, 17, 64, 100, 4096])
def test_counts_are_chunk_size_invariant(w3c_log, chunk_size):
    """
    Brief: Header state carries across chunk boundaries so any chunk size gives the same counts.

    Inputs:
      - chunk_size: from single-byte windows to one chunk for the whole file

    Outputs:
      - None: Asserts counts equal the reference
    """
    counter, stats = _scan(w3c_log, chunk_size)
    assert dict(counter.snapshot()) == W3C_COUNTS
    assert [s.index for s in stats] == list(range(len(stats)))


def test_total_hits_equal_well_formed_lines(write_log):
    """
    Brief: Sum of counts equals the number of well-formed, non-comment lines.

    Inputs:
      - generated log with comments, blanks and malformed lines mixed in

    Outputs:
      - None: Asserts totals for several chunk sizes
    """
    rng = random.Random(1234)
    ips = [f"198.51.100.{i}" for i in range(1, 40)]
    lines = ["#Fields: date time c-ip cs-uri-stem"]
    expected = {}
    for i in range(3000):
        roll = rng.random()
        if roll < 0.05:
            lines.append("# comment")
        elif roll < 0.08:
            lines.append("   ")
        elif roll < 0.1:
            lines.append("2012-03-26")
        else:
            ip = rng.choice(ips)
            expected[ip] = expected.get(ip, 0) + 1
            lines.append(f"2012-03-26 00:{i % 60:02d}:00 {ip} /p{i}")
    path = write_log("\n".join(lines))

    for chunk_size in (31, 512, 4096, 1 << 20):
        counter, _ = _scan(path, chunk_size)
        assert dict(counter.snapshot()) == expected
        assert sum(counter.snapshot().values()) == sum(expected.values())


def test_long_line_counted_once(write_log):
    """
    Brief: A line longer than the chunk size is counted exactly once.

    Inputs:
      - chunk_size: 16 bytes against a 5 KB line

    Outputs:
      - None: Asserts a single hit for the long line's address
    """
    long_line = "2012-03-26 00:00:01 10.9.9.9 /" + "a" * 5000
    path = write_log(f"#Fields: date time c-ip cs-uri-stem\n{long_line}\n2012 00 10.0.0.1 /\n")

    counter, _ = _scan(path, 16)

    assert dict(counter.snapshot()) == {"10.9.9.9": 1, "10.0.0.1": 1}


def test_lines_before_header_use_default_column(write_log):
    path = write_log("c-ip 10.0.0.1 x\n#Fields: date time c-ip\n2012 00 10.0.0.2\n")
    counter, _ = _scan(path, 4096, layout=FieldLayout(default_column=1))
    assert dict(counter.snapshot()) == {"10.0.0.1": 1, "10.0.0.2": 1}


def test_fixed_column_ignores_headers(write_log):
    path = write_log("#Fields: date time c-ip\n10.0.0.1 00:00 x\n10.0.0.1 00:01 y\n")
    layout = FieldLayout(default_column=0, use_headers=False)
    counter, _ = _scan(path, 8, layout=layout)
    assert dict(counter.snapshot()) == {"10.0.0.1": 2}


@pytest.mark.parametrize("chunk_size", [1, 7, 64, 4096])
def test_header_without_ip_field_counts_nothing(write_log, chunk_size):
    """
    Brief: Lines under a '#Fields' header lacking c-ip are skipped, not read from the default column.

    Inputs:
      - chunk_size: splitter window in bytes

    Outputs:
      - None: Asserts no hits, no lookups and both lines skipped
    """
    path = write_log(
        "#Fields: date time s-ip cs-method\n"
        "2012-03-26 00:00:01 192.0.2.10 GET\n"
        "2012-03-26 00:00:02 192.0.2.10 POST\n"
    )
    resolver = FakeResolver()
    cache = ResolutionCache(resolver=resolver)
    try:
        counter, stats = _scan(path, chunk_size, cache=cache)
        assert cache.wait(timeout=5)
    finally:
        cache.close(wait=True)

    assert dict(counter.snapshot()) == {}
    assert resolver.calls == []
    assert sum(s.lines for s in stats) == 2
    assert sum(s.skipped for s in stats) == 2


@pytest.mark.parametrize("chunk_size", [1, 5, 16, 4096])
def test_ip_column_returns_with_next_header(write_log, chunk_size):
    path = write_log(
        "#Fields: date time c-ip\n"
        "2012 00 10.0.0.1\n"
        "#Fields: date time s-ip\n"
        "2012 00 192.0.2.10\n"
        "#Fields: c-ip date\n"
        "10.0.0.2 2012\n"
    )
    counter, stats = _scan(path, chunk_size)
    assert dict(counter.snapshot()) == {"10.0.0.1": 1, "10.0.0.2": 1}
    assert sum(s.skipped for s in stats) == 1


@pytest.mark.parametrize("workers", [0, -1])
def test_non_positive_worker_count_rejected(workers):
    with pytest.raises(ValueError):
        ParallelScanner(HitCounter(), max_workers=workers)


def test_default_worker_count_is_positive():
    assert ParallelScanner(HitCounter()).max_workers >= 1


def test_invalid_utf8_does_not_break_scan(write_log):
    path = write_log(b"a 10.0.0.1 \xff\xfe\nb 10.0.0.1 ok\n")
    counter, stats = _scan(path, 4)
    assert dict(counter.snapshot()) == {"10.0.0.1": 2}


def test_first_seen_addresses_requested_once(w3c_log):
    """
    Brief: Every distinct address is looked up exactly once per scan, regardless of workers.

    Inputs:
      - w3c_log with repeated addresses, single-byte chunks

    Outputs:
      - None: Asserts one resolver call per address
    """
    resolver = FakeResolver()
    cache = ResolutionCache(resolver=resolver)
    try:
        _scan(w3c_log, 1, cache=cache, workers=8)
        assert cache.wait(timeout=5)
        assert sorted(resolver.calls) == sorted(W3C_COUNTS)
        assert set(cache.snapshot()) == set(W3C_COUNTS)
    finally:
        cache.close(wait=True)


def test_scan_without_cache_only_counts(w3c_log):
    counter, _ = _scan(w3c_log, 64, cache=None)
    assert dict(counter.snapshot()) == W3C_COUNTS


def test_scan_chunk_uses_given_start_column():
    """
    Brief: scan_chunk starts from the column handed in by the dispatcher.

    Inputs:
      - chunk: body lines only, no header

    Outputs:
      - None: Asserts the address is read from column 3
    """
    counter = HitCounter()
    scanner = ParallelScanner(counter, max_workers=1)
    chunk = Chunk(index=0, offset=0, data=b"d t s 10.0.0.5 x\r\n")

    stats = scanner.scan_chunk(chunk, 3)

    assert stats.counted == 1
    assert dict(counter.snapshot()) == {"10.0.0.5": 1}


def test_scan_empty_sequence():
    scanner = ParallelScanner(HitCounter(), max_workers=2)
    assert scanner.scan([]) == []


def test_scan_with_many_chunks_bounded_pending(write_log):
    path = write_log("".join(f"x 10.0.{i % 7}.1\n" for i in range(2000)))
    counter, stats = _scan(path, 32, workers=2)
    assert sum(counter.snapshot().values()) == 2000
    assert len(stats) > 4
