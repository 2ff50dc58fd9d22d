"""Services for the dose tracker: scheduling engine, notifications, reminders."""
