"""Scraper package providing modular components for the TikTok video scraper.

This package contains small, well-defined modules (evasion profile, browser
session, API access, pagination, reporting) that the CLI and HTTP entry
points compose into a single scrape run.
"""
