"""Rent Reminder Service

Tracks the tenants of a rented property and reminds the operator, through a
chat channel, on each tenant's monthly payment day:
- Interprets operator commands relayed from the chat channel
- Stores tenant records with one tenant per room
- Derives each tenant's payment day from the move-in date
- Posts the daily payment-day reminders
"""

__version__ = "1.0.0"
