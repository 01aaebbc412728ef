"""
Monte Carlo Gold Price Simulation Package
=========================================

Estimates drift and volatility from a historical price series, simulates
future price paths with Geometric Brownian Motion and summarizes the
terminal price distribution.
"""
