import pytest

from src.data.loader import LoaderState, PriceLoader
from src.simulation.errors import DataNotReadyError, InsufficientDataError, PriceSourceError


def test_new_loader_rejects_price_access():
    loader = PriceLoader()

    assert loader.state is LoaderState.NOT_LOADED
    assert not loader.is_loaded
    with pytest.raises(DataNotReadyError):
        loader.prices
    with pytest.raises(DataNotReadyError):
        loader.last_price


def test_load_market_transitions_to_loaded():
    loader = PriceLoader().load_market("souq")

    assert loader.state is LoaderState.LOADED
    assert loader.last_price == 42.0
    assert len(loader.prices) == 8
    assert loader.source == "market:souq"


def test_unknown_market_keeps_loader_empty():
    loader = PriceLoader()
    with pytest.raises(PriceSourceError):
        loader.load_market("atlantis")
    assert loader.state is LoaderState.NOT_LOADED


def test_too_short_series_is_not_loaded():
    loader = PriceLoader()
    with pytest.raises(InsufficientDataError):
        loader.load([100.0])
    assert not loader.is_loaded


def test_loaded_prices_are_read_only(loaded_loader):
    with pytest.raises(ValueError):
        loaded_loader.prices[0] = 1.0


def test_reset_returns_to_not_loaded(loaded_loader):
    loaded_loader.reset()
    assert loaded_loader.state is LoaderState.NOT_LOADED
    with pytest.raises(DataNotReadyError):
        loaded_loader.prices


def test_load_csv_drops_non_numeric_rows(tmp_path):
    path = tmp_path / "gold.csv"
    path.write_text("Date,Price_JOD\n2024-01-01,41.25\n2024-01-02,abc\n2024-01-03,41.50\n2024-01-04,\n2024-01-05,41.60\n")

    loader = PriceLoader().load_csv(str(path))

    assert list(loader.prices) == [41.25, 41.50, 41.60]
    assert loader.last_price == 41.60
    assert loader.source == str(path)


def test_load_csv_custom_column(tmp_path):
    path = tmp_path / "gold.csv"
    path.write_text("close\n10\n11\n12\n")

    loader = PriceLoader().load_csv(str(path), column="close")
    assert list(loader.prices) == [10.0, 11.0, 12.0]


def test_load_csv_missing_column(tmp_path):
    path = tmp_path / "gold.csv"
    path.write_text("Date,close\n2024-01-01,41.25\n2024-01-02,41.30\n")

    with pytest.raises(PriceSourceError, match="Price_JOD"):
        PriceLoader().load_csv(str(path))


def test_load_csv_missing_file(tmp_path):
    with pytest.raises(PriceSourceError):
        PriceLoader().load_csv(str(tmp_path / "missing.csv"))


def test_load_csv_with_one_usable_price(tmp_path):
    path = tmp_path / "gold.csv"
    path.write_text("Price_JOD\n41.25\nabc\n")

    with pytest.raises(InsufficientDataError):
        PriceLoader().load_csv(str(path))


def test_market_name_is_recorded_and_cleared():
    loader = PriceLoader().load_market(" Souq ")
    assert loader.market == "souq"
    assert loader.source == "market:souq"

    loader.reset()
    assert loader.market is None


def test_csv_load_has_no_market(tmp_path):
    path = tmp_path / "gold.csv"
    path.write_text("Price_JOD\n41.25\n41.30\n")

    assert PriceLoader().load_csv(str(path)).market is None
