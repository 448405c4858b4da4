from urllib.parse import unquote

import pytest

from tvsearch2epg.parser import CatalogError, ChannelCatalog, DEFAULT_MARKUP

from .pages import FakeFetcher, catalog_page, catalog_row

CATALOG_URL = DEFAULT_MARKUP.catalog_url


def discover(*rows):
    fetcher = FakeFetcher({CATALOG_URL: catalog_page(*rows)})
    catalog = ChannelCatalog(fetcher)
    return catalog, catalog.discover_all()


def test_channels_keyed_by_id_in_page_order():
    _, channels = discover(
        catalog_row("sf1", "SRF 1", "https://img.example/sf1.png"),
        catalog_row("sf2", "SRF zwei", "https://img.example/sf2.png"),
    )

    assert list(channels) == ["sf1", "sf2"]
    assert channels["sf2"].display_name == "SRF zwei"
    assert channels["sf2"].logo_url == "https://img.example/sf2.png"


@pytest.mark.parametrize("slug", ["rsi-la-1", "3 plus", "arte/de", "tf1+"])
def test_channel_id_is_a_path_segment_that_round_trips(slug):
    _, channels = discover(catalog_row(slug, "Name"))

    (channel_id,) = channels
    assert "/" not in channel_id
    assert " " not in channel_id
    assert unquote(channel_id) == slug


def test_rows_without_name_or_logo_are_skipped():
    catalog, channels = discover(
        catalog_row("noname", name=None),
        catalog_row("nologo", logo=None),
        catalog_row("ok", "OK"),
    )

    assert list(channels) == ["ok"]
    assert catalog.skipped_count == 2


def test_scheme_relative_logo_gets_catalog_scheme():
    _, channels = discover(catalog_row("sf1", "SRF 1", "//static.search.ch/logos/sf1.png"))

    assert channels["sf1"].logo_url == "https://static.search.ch/logos/sf1.png"


def test_duplicate_rows_keep_first_occurrence():
    _, channels = discover(catalog_row("sf1", "First"), catalog_row("sf1", "Second"))

    assert len(channels) == 1
    assert channels["sf1"].display_name == "First"


def test_unreachable_catalog_is_fatal():
    catalog = ChannelCatalog(FakeFetcher({CATALOG_URL: None}))

    with pytest.raises(CatalogError):
        catalog.discover_all()


def test_page_without_rows_yields_empty_catalog():
    _, channels = discover()

    assert channels == {}
