"""Backend de réservation de prestations: formulaire -> réservation Supabase -> paiement Stripe."""
