# Browser automation configuration

# Timeouts (seconds)
PAGE_LOAD_TIMEOUT = 30
ELEMENT_TIMEOUT = 10

# Browser settings
VIEWPORT = {"width": 1366, "height": 768}

BROWSER_ARGS = [
    "--window-size=1366,768",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]

# Intake form layout (ids match static/index.html)
SECTION_HEADER = "#{section} .section-header"
SECTION_CONTENT = "#{section} .section-content"
SUBMIT_SELECTOR = ".submit-btn"
