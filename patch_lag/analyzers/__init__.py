"""Update-history parsing, selection and day-delta analysis."""
