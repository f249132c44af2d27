EXTRACTION_PROMPT = """Analyze the following text and extract the appointment details.
Today's date is {today}.
The current year is {year}.

Text: "{text}"

Return a JSON object with the following fields:
- "title": The subject of the appointment.
- "date": The date in "YYYY-MM-DD" format.
- "time": The time in 24-hour "HH:MM" format.

If any field cannot be determined, its value should be null.
For example, 'tomorrow' should be resolved to the correct date. 'Evening' can be interpreted as '19:00'."""

__all__ = ["EXTRACTION_PROMPT"]
