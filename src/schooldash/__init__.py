"""SchoolDash: school attendance and administration dashboard."""
