"""Infrastructure layer: descriptor files, backend client and HTTP front end."""
