"""pixfetch terminal application."""
