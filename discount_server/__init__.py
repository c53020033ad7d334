"""Single-use discount codes issued and redeemed over a WebSocket."""
