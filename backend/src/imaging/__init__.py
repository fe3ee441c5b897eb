"""Image decode, mask fitting and encode via Pillow."""
