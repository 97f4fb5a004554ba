"""Client-side session: auth state, refresh scheduling and the query cache."""
