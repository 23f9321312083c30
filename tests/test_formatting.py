from datetime import datetime, timedelta, timezone

from statuswatch.formatting import (
    components_to_str,
    markdown_hyperlink,
    rfc822,
    slack_hyperlink,
    title_case,
)
from statuswatch.types import ComponentRef


def test_slack_hyperlink_wraps_link_and_name():
    assert slack_hyperlink("https://status.example.com/i/1", "Outage") == (
        "<https://status.example.com/i/1|Outage>"
    )


def test_markdown_hyperlink_wraps_name_and_link():
    assert markdown_hyperlink("Incident Link", "https://status.example.com") == (
        "[Incident Link](https://status.example.com)"
    )


def test_components_to_str_keeps_every_name_in_order():
    names = ["API", "Web", "Database"]
    text = components_to_str(ComponentRef(name=n, id=i) for i, n in enumerate(names))
    assert text.split(", ") == names


def test_components_to_str_empty():
    assert components_to_str([]) == ""


def test_title_case_words():
    assert title_case("in progress") == "In Progress"


def test_title_case_apostrophe_stays_in_word():
    assert title_case("don't stop") == "Don't Stop"


def test_title_case_is_idempotent():
    once = title_case("MAJOR outage of the api")
    assert title_case(once) == once
    assert once.split()[0][0].isupper()


def test_rfc822_reference_time():
    moment = datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)
    assert rfc822(moment) == "02 Jan 06 15:04 UTC"


def test_rfc822_converts_to_utc():
    aware = datetime(2006, 1, 2, 10, 4, tzinfo=timezone(timedelta(hours=-5)))
    assert rfc822(aware) == rfc822(datetime(2006, 1, 2, 15, 4, tzinfo=timezone.utc))


def test_rfc822_naive_taken_as_utc():
    naive = datetime(2020, 7, 9, 8, 30)
    assert rfc822(naive) == rfc822(naive.replace(tzinfo=timezone.utc))