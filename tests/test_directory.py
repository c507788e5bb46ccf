import random
from collections import Counter
from dataclasses import replace

import requests
from fakes import FakeClock, FakeResponse, FakeSession

from stream_resolver.directory import (
    CURATED_INVIDIOUS,
    CURATED_PIPED,
    INVIDIOUS,
    PIPED,
    ProviderDirectory,
    parse_instance_table,
)

INSTANCES_MD = """\
# Instances

Some introductory text mentioning nothing relevant.

| Instance Frontend URL | Instance API URL | Locations | CDN? |
| --- | --- | --- | --- |
| https://piped.video | https://pipedapi.kavin.rocks | Germany | Yes |
| https://piped.example | https://pipedapi.example.org/ | Netherlands | No |
| broken row without enough pipes
| https://piped.bad | not-a-url | Nowhere | No |
|
| https://piped.other | https://pipedapi.other.net | Finland | No |
"""


def _directory(test_settings, session, **kwargs):
    kwargs.setdefault("rng", random.Random(7))
    kwargs.setdefault("clock", FakeClock())
    return ProviderDirectory(test_settings, session=session, **kwargs)


def test_parse_instance_table_extracts_api_column():
    assert parse_instance_table(INSTANCES_MD) == [
        "https://pipedapi.kavin.rocks",
        "https://pipedapi.example.org/",
        "https://pipedapi.other.net",
    ]


def test_parse_instance_table_tolerates_garbage():
    assert parse_instance_table("") == []
    assert parse_instance_table("<html>rate limited</html>") == []
    assert parse_instance_table("| API |\n| a | b |") == []


def test_candidates_merge_remote_and_curated_without_duplicates(test_settings):
    session = FakeSession({test_settings.piped_instances_url: FakeResponse(text=INSTANCES_MD)})
    directory = _directory(test_settings, session)

    candidates = directory.list_candidates()
    piped = [c.base_url for c in candidates if c.family == PIPED]

    assert len(piped) == len(set(piped))
    assert set(piped) == set(CURATED_PIPED) | {
        "https://pipedapi.example.org",
        "https://pipedapi.other.net",
    }


def test_piped_candidates_precede_invidious(test_settings):
    session = FakeSession({test_settings.piped_instances_url: FakeResponse(text=INSTANCES_MD)})
    candidates = _directory(test_settings, session).list_candidates()

    families = [c.family for c in candidates]
    first_invidious = families.index(INVIDIOUS)
    assert all(f == PIPED for f in families[:first_invidious])
    assert all(f == INVIDIOUS for f in families[first_invidious:])
    assert {c.base_url for c in candidates if c.family == INVIDIOUS} == set(CURATED_INVIDIOUS)


def test_remote_failure_falls_back_to_curated(test_settings):
    session = FakeSession({test_settings.piped_instances_url: FakeResponse(status_code=500)})
    candidates = _directory(test_settings, session).list_candidates()

    assert {c.base_url for c in candidates if c.family == PIPED} == set(CURATED_PIPED)


def test_network_error_falls_back_to_curated(test_settings):
    session = FakeSession({test_settings.piped_instances_url: requests.ConnectionError("dns failure")})
    candidates = _directory(test_settings, session).list_candidates()

    assert {c.base_url for c in candidates if c.family == PIPED} == set(CURATED_PIPED)


def test_remote_disabled_skips_fetch(test_settings):
    session = FakeSession()
    directory = _directory(replace(test_settings, directory_remote_enabled=False), session)

    directory.list_candidates()

    assert session.calls == []


def test_remote_list_is_memoized_until_ttl(test_settings):
    clock = FakeClock()
    session = FakeSession({test_settings.piped_instances_url: FakeResponse(text=INSTANCES_MD)})
    directory = _directory(test_settings, session, clock=clock)

    directory.list_candidates()
    clock.advance(test_settings.directory_ttl_seconds - 1)
    directory.list_candidates()
    assert len(session.calls) == 1

    clock.advance(1)
    directory.list_candidates()
    assert len(session.calls) == 2


def test_shuffle_preserves_membership_and_spreads_positions(test_settings):
    directory = _directory(
        replace(test_settings, directory_remote_enabled=False),
        FakeSession(),
        rng=random.Random(1234),
    )

    leaders = Counter()
    for _ in range(300):
        piped = [c.base_url for c in directory.list_candidates() if c.family == PIPED]
        assert sorted(piped) == sorted(CURATED_PIPED)
        leaders[piped[0]] += 1

    assert set(leaders) == set(CURATED_PIPED)
