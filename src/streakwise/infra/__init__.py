"""Infrastructure: database bootstrap and SQLModel-backed stores."""
