"""Modules used as separate discovery scopes by the scope-ordering tests."""
