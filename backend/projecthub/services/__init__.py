"""Domain services shared by page controllers and widgets."""
