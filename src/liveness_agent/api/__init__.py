"""HTTP surface — routes and application factory."""
