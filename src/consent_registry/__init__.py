"""Consent registry site project: settings, URL routing and WSGI entry point."""
