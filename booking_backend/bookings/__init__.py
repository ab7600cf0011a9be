"""Module 'bookings' (feature-first): modèle, validation, repository Supabase, cycle de vie, vues."""
