"""Front ends for the store inventory: a local Flask editor and a text console."""
