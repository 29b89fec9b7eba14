app_name = "hijri_calendar"
app_title = "Hijri Calendar"
app_publisher = "Hijri Calendar Contributors"
app_description = "Masehi/Hijriyah calendar switching, Umm al-Qura conversion and Indonesian date formatting."
app_email = "support@example.com"
app_license = "MIT"

# Boot
boot_session = "hijri_calendar.boot.boot_session"

# Jinja
jinja = {
    "filters": [
        "hijri_calendar.api.context.format_date",
        "hijri_calendar.api.context.to_hijri_string",
    ],
}

# Fixtures / Data
fixtures = []
