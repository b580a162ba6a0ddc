"""Demo-app paths, CSS selectors, provider endpoints, and schedules."""

# ── Demo App Paths ───────────────────────────────────────────────────────────

SIGNUP_PATH = "signup"
LOGIN_PATH = "login"

# ── Provider ─────────────────────────────────────────────────────────────────

SESSIONS_ENDPOINT = "/v1/sessions"
RELEASE_STATUS = "REQUEST_RELEASE"
REPLAY_URL = "https://browserbase.com/sessions/"  # append session id

# ── CSS Selectors ────────────────────────────────────────────────────────────

SELECTORS = {
    # Codespaces tunnel warning shown in front of private demo deployments
    "interstitial_continue": ",".join([
        "button.btn-primary.btn.js-toggle-hidden",
        'button:has-text("Continue")',
        '[onclick*="tunnel_phishing_protection"]',
    ]),

    # Signup page
    "signup_form_control": ".form-control",
    "signup_password": "input#password",
    "signup_password_confirm": "input#password2",
    "signup_adult_checkbox": ".form-check-input",
    "signup_plan_button": 'button:has-text("SELECT {plan}")',
    "signup_submit": '[accesskey="e"]',

    # Login page
    "login_username": "#username",
    "login_password": "#password",
    "login_submit": 'input[type="submit"]',
    "login_error": ".alert-error",

    # Home page
    "signup_modal": "#signup-modal",
    "signup_modal_close": "#close-modal",
    "modal_backdrop": ".modal-backdrop",
    "movie_link": 'a[accesskey="{number}"]',

    # Account menu
    "user_dropdown": ':text-matches("Welcome back to Hogflix")',
    "logout_link": 'a[accesskey="o"]',
}

SIGNUP_LABELS = {
    "username": "Username",
    "email": "Email",
}

# Tried in order; the first one present wins
CSRF_TOKEN_SCRIPT = """() => (
    document.querySelector('input[name="csrf_token"]')?.value ||
    document.querySelector('meta[name="csrf-token"]')?.content ||
    document.querySelector('[data-csrf]')?.getAttribute('data-csrf') ||
    null
)"""

LOGIN_ERROR_SCRIPT = """(selector) => {
    const el = document.querySelector(selector);
    return el ? el.textContent.trim() : null;
}"""

MODAL_VISIBLE_SCRIPT = """(selector) => {
    const modal = document.querySelector(selector);
    return !!modal && window.getComputedStyle(modal).display !== 'none';
}"""

MODAL_REMOVE_SCRIPT = """([modal, backdrop]) => {
    document.querySelector(modal)?.remove();
    document.querySelector(backdrop)?.remove();
    document.body.classList.remove('modal-open');
}"""

# ── Challenge Detection ──────────────────────────────────────────────────────

CHALLENGE_SELECTORS = [
    ("iframe[src*='hcaptcha']", "hcaptcha"),
    ("iframe[src*='recaptcha']", "recaptcha"),
    ("#cf-turnstile", "cloudflare_turnstile"),
    (".cf-challenge", "cloudflare_challenge"),
    (".alert-rate-limit", "rate_limit"),
]

# ── Schedules ────────────────────────────────────────────────────────────────

# (weekdays with Monday == 0, local "HH:MM" fire times)
SCHEDULES = [
    ((0, 2, 4), ("09:30", "15:30")),
    ((1, 3), ("08:00", "12:00", "17:00")),
]
