"""Pipeline stages and the immutable types they exchange."""
