"""
Crypto Monetizer: payout settings, exchange rate comparison and a simulated
monetization workflow for a wallet dashboard.

The settings store and rate quotes are served over HTTP by api_server; the
monetization sequencer runs on the client side and never moves funds.
"""

__version__ = "0.1.0"
