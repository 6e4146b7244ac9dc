"""Clients for services outside the API: the generation provider and Supabase Storage."""
