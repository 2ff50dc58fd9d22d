"""Telegram bot for the dose tracker."""
