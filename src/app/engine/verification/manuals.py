# src/app/engine/verification/manuals.py

from .base import KeyManual, ManualField

GEMINI_MANUAL = KeyManual(
    name="Google Gemini AI",
    description="AI content generation with Gemini 1.5 Pro",
    requirements=[
        "Google account",
        "Google Cloud project with billing enabled",
        "Generative Language API enabled",
    ],
    steps=[
        "Open Google AI Studio (https://makersuite.google.com/app/apikey)",
        "Sign in with your Google account",
        'Click "Create API Key"',
        "Select your Google Cloud project or create a new one",
        'Copy the generated API key (starts with "AIza")',
        "Enable the Generative Language API in Google Cloud Console",
    ],
    key_format="AIzaSy...",
    docs_url="https://ai.google.dev/docs",
    pricing="Pay-per-use based on tokens",
    extra_fields=[
        ManualField(name="model", description="Gemini model used for the probe", example="gemini-1.5-pro-latest"),
    ],
    notes=[
        "Free tier available with rate limits",
        "Requires Google Cloud billing for production use",
        "Keep the key on the server side, never in frontend code",
    ],
)

UNDETECTABLE_MANUAL = KeyManual(
    name="Undetectable AI",
    description="Content humanization",
    requirements=[
        "Paid subscription (API not available on the free plan)",
        "Verified email address",
        "Sufficient credits in the account",
    ],
    steps=[
        "Open Undetectable.ai (https://undetectable.ai)",
        "Create an account and verify your email",
        "Choose a paid subscription plan",
        "Go to API Settings in your dashboard",
        "Generate a new API key",
        "Copy the API key (UUID format)",
    ],
    key_format="xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx",
    docs_url="https://docs.undetectable.ai",
    pricing="Subscription-based with credit system",
    notes=[
        "Processing time varies with content length",
        "Monitor credit usage to avoid service interruption",
    ],
)

SAPLING_MANUAL = KeyManual(
    name="Sapling AI Detection",
    description="AI content detection and analysis",
    requirements=["Sapling AI account", "API subscription", "Valid payment method"],
    steps=[
        "Open Sapling AI (https://sapling.ai)",
        "Sign up for an account",
        "Navigate to the API section",
        "Subscribe to the AI Detection API",
        "Generate your API key",
        "Copy the key from your dashboard",
    ],
    key_format="XXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX",
    docs_url="https://sapling.ai/docs",
    pricing="Pay-per-request",
    notes=[
        "Returns a confidence score for AI detection",
        "Rate limits depend on the subscription tier",
    ],
)

RESEND_MANUAL = KeyManual(
    name="Resend Email Service",
    description="Email delivery for notifications",
    requirements=[
        "Verified domain for sending emails",
        "DNS records configured correctly",
        "Account in good standing",
    ],
    steps=[
        "Open Resend (https://resend.com)",
        "Create an account and verify your email",
        "Add and verify your sending domain",
        "Configure DNS records (SPF, DKIM, DMARC)",
        "Go to API Keys in your dashboard",
        "Create a new API key",
        'Copy the key (starts with "re_")',
    ],
    key_format="re_xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx",
    docs_url="https://resend.com/docs",
    pricing="Free tier available, pay-per-email for higher volumes",
    extra_fields=[
        ManualField(
            name="senderEmail",
            description="Verified sender email address",
            required=True,
            example="noreply@yourdomain.com",
        ),
    ],
    notes=[
        "Validating the key sends one real test email",
        "Domain verification is required for production use",
    ],
)

PHANTOM_MANUAL = KeyManual(
    name="PhantomBuster",
    description="LinkedIn automation and data collection",
    requirements=[
        "PhantomBuster subscription",
        "A created Phantom automation",
        "Sufficient execution credits",
    ],
    steps=[
        "Open PhantomBuster (https://phantombuster.com)",
        "Create an account and choose a plan",
        "Create a new Phantom or pick an existing one",
        "Note the Phantom ID from the URL",
        "Go to Settings > API",
        "Generate an API key",
        "Copy both the API key and the Phantom ID",
    ],
    key_format="xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx",
    docs_url="https://docs.phantombuster.com",
    pricing="Subscription-based with execution credits",
    extra_fields=[
        ManualField(
            name="phantomId",
            description="ID of the Phantom automation to use",
            required=True,
            example="1234567890123456789",
        ),
    ],
    notes=[
        "Respect LinkedIn terms of service",
        "Monitor execution limits and credits",
    ],
)

APIFY_MANUAL = KeyManual(
    name="Apify Web Scraping",
    description="Data extraction for LinkedIn profiles",
    requirements=[
        "Apify account with credits",
        "Access to the LinkedIn Profile Scraper actor",
    ],
    steps=[
        "Open Apify (https://apify.com)",
        "Create an account and verify your email",
        "Add credits to your account",
        "Go to Settings > Integrations",
        "Generate a new API token",
        'Copy the token (starts with "apify_api_")',
    ],
    key_format="apify_api_xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx",
    docs_url="https://docs.apify.com",
    pricing="Credit-based",
    notes=[
        "Scraping runs consume credits",
        "Respect website terms of service and rate limits",
    ],
)

UPLOAD_POST_MANUAL = KeyManual(
    name="UploadPost Multi-Platform",
    description="Multi-platform content publishing",
    requirements=[
        "UploadPost account with API access",
        "LinkedIn OAuth completed",
        "Active subscription",
    ],
    steps=[
        "Open UploadPost (https://uploadpost.com)",
        "Create an account and verify your email",
        "Complete the LinkedIn OAuth connection",
        "Subscribe to a plan with API access",
        "Go to API Settings",
        "Generate a JWT token for API access",
    ],
    key_format="eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
    docs_url="https://docs.uploadpost.com",
    pricing="Subscription-based with post limits",
    notes=[
        "Each social platform must be connected via OAuth",
        "Monitor post limits and scheduling quotas",
    ],
)
