"""Root colors and shading."""
