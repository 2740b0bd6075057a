"""Agent scratch memory stores."""
