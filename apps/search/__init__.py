"""Property search: date availability, coordinates, suggestions and destinations."""
