"""ORM models: one table holding every collection slot."""
