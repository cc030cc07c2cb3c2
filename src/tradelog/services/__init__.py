"""Services: journal loading, analytics and console reporting."""
