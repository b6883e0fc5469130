"""Command line app for swatchkit."""
