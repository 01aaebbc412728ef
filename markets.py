# Closing gold prices (JOD per gram) for the local markets the simulator ships with.
# price_data = {'souq': [41.25, 41.30, 41.50]}

from src.simulation.errors import PriceSourceError

price_data = {
   # Downtown gold souq
   "souq": [41.25, 41.30, 41.50, 41.60, 41.45, 41.80, 41.90, 42.00],

   # Madina street dealers
   "madina": [41.10, 41.25, 41.35, 41.40, 41.70, 41.85, 41.95],

   # Both markets, souq first
   "combined": [
      41.25, 41.30, 41.50, 41.60, 41.45, 41.80, 41.90, 42.00,
      41.10, 41.25, 41.35, 41.40, 41.70, 41.85, 41.95
   ],
}

markets = sorted(price_data)


def get_market_prices(market):
   """Return a copy of the static price series for ``market``."""
   key = market.strip().lower()
   if key not in price_data:
      raise PriceSourceError(f"Unknown market '{market}'. Available markets: {', '.join(markets)}")
   return list(price_data[key])
