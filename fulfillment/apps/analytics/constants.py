class StatsWindow:
    TODAY = "today"
    WEEK = "week"
    ALL = "all"

    CHOICES = [TODAY, WEEK, ALL]


class StatsSubject:
    PARTNER = "partner"
    VENDOR = "vendor"

    CHOICES = [PARTNER, VENDOR]
