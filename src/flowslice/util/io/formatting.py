"""
Formatting utilities for human-readable output.

Provides functions to format time durations for console and report output.
"""


def elapsedTime(t):
    """
    Format a time duration in seconds as a human-readable string.
    
    Automatically selects the most appropriate unit:
    - Milliseconds for times < 1 second
    - Seconds for times < 1 minute
    - Minutes for times < 1 hour
    - Hours for times >= 1 hour
    
    Args:
        t: Time duration in seconds (float)
        
    Returns:
        Formatted string with appropriate unit (e.g., "123.4 ms", "45.6 s")
        
    Example:
        elapsedTime(0.05) -> "50 ms"
        elapsedTime(125.5) -> "2.091 m"
    """
    if t < 1.0:
        return "%5.4g ms" % (t * 1000.0)
    elif t < 60.0:
        return "%5.4g s" % (t)
    elif t < 3600.0:
        return "%5.4g m" % (t / 60.0)
    else:
        return "%5.4g h" % (t / 3600.0)


def milliseconds(t):
    """Whole milliseconds in a duration given in seconds, for CSV reports."""
    return int(round(t * 1000.0))
