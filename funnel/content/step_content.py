# funnel/content/step_content.py
"""
Copy for the funnel steps.

Plain strings only: titles, option labels and the loading screen rotations.
Option labels double as option identity, so every label within a step must
be unique.
"""

# ============================================================================
# STEP TITLES
# ============================================================================

TITLES = {
    "intro": "Surprise your partner with ideas you have never tried before",
    "bio": "Meet your coach",
    "q1": "Where are you in your love life right now?",
    "q2": "How would you rate your confidence in the bedroom?",
    "q3": "What is your biggest difficulty right now?",
    "q4": "What would you most like to feel?",
    "testimonials_pre": "What our readers are saying",
    "agitation": "Why the same routine stops working",
    "transformation": "What changes when you know what to do",
    "benefits": "Inside the guide you will discover how to",
    "q5": "What frustrates you the most today?",
    "q6": "When did you last feel truly desired?",
    "effects": "Three things that happen the first time you try it",
    "final_ask": "Do you want access to the guide?",
    "loading": "Loading...",
    "sales_page": "Your personalized guide is ready!",
}

# ============================================================================
# SINGLE-CHOICE OPTIONS
# ============================================================================

Q1_OPTIONS = [
    "💍 I am in a relationship",
    "💘 I am seeing someone but it is not official yet",
    "💃 I am single and free",
    "🤔 It is complicated…",
]

Q2_OPTIONS = [
    "🙈 Total beginner, I need to learn from scratch",
    "😕 I get by, but feel insecure sometimes",
    "😏 I do well, but lack variety",
    "😈 I am great, but want new techniques",
]

Q3_OPTIONS = [
    "😶 I never really manage to surprise",
    "👀 I feel shy trying new things and stick to the basics",
    "🥱 I get tired quickly and lose the rhythm",
    "🥹 I do not know how to vary",
]

Q6_OPTIONS = [
    "A long time ago…",
    "It is so rare that I feel I am not good enough",
    "Recently, but I could have done better",
    "I have never really felt that",
]

# ============================================================================
# MULTI-SELECT OPTIONS
# ============================================================================

# "Desired outcomes"
Q4_OPTIONS = [
    "🔥 Seeing them lose control",
    "💦 Leaving them completely satisfied",
    "😈 Feeling they will never forget me",
    "🤲 Feeling fully in charge",
    "👑 Hearing I am the best they ever had",
]

Q5_OPTIONS = [
    "I feel insecure because I cannot satisfy them",
    "I get the impression they think of someone else",
    "They seem distant, as if it were an obligation",
    "I never feel truly unforgettable",
    "They do not even reach out anymore...",
]

# ============================================================================
# FINAL ASK
# ============================================================================

FINAL_ASK_CONFIRM = "✅ Yes, I really want it"
FINAL_ASK_DECLINE = "🚫 I am not sure..."

# ============================================================================
# LOADING SCREEN
# ============================================================================

LOADING_MESSAGES = [
    "Analyzing your profile...",
    "Finding the best ideas for your situation...",
    "Personalizing your guide...",
    "Selecting exclusive bonuses...",
    "You are going to feel unique...",
    "Preparing your members area...",
]

LOADING_TESTIMONIALS = [
    {"name": "Jessica M.", "text": "It changed my life completely!"},
    {"name": "Amanda R.", "text": "My partner cannot stop thinking about me now."},
    {"name": "Carla T.", "text": "Best investment I ever made."},
    {"name": "Beatriz L.", "text": "I feel so much more confident."},
]
