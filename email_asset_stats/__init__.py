"""Dashboard statistics for the email asset CSV export."""
