"""Services: backend API client, payments, money and currency helpers."""
