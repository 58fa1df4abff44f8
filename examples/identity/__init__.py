"""Identity example domain and its fixture scenarios."""
