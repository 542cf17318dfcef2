"""
API server package: HTTP/REST interface.

Exposes payout settings per wallet and synthetic exchange rates to the
dashboard. Delegates to the database and exchange layers for data.
"""
