"""HTTP surface for nimauth."""
