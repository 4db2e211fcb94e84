"""Billing: units, exchange rates, balance store and the billing gate."""
