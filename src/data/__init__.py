"""
Price Data Sources
==================

Loaders that turn a static market table or a CSV export into a price series
for the simulation package.
"""
