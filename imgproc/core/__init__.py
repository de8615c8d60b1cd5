"""Core image types, configuration, errors and validation for imgproc."""
