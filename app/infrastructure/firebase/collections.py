"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when you first write a document. Use these constants so collection names
stay consistent and act as the single source of truth for the "schema".

Example:
    from app.infrastructure.firebase.collections import COLLECTION_PROGRAMS

    await db.collection(COLLECTION_PROGRAMS).document(program_id).get()
"""

# Identity and tenancy (document id = Clerk user id / Clerk org id)
COLLECTION_USERS = "users"
COLLECTION_ORG_SETTINGS = "org_settings"
COLLECTION_ORG_BRANDING = "org_branding"

# Program templates
COLLECTION_PROGRAMS = "programs"
COLLECTION_PROGRAM_MODULES = "program_modules"
COLLECTION_PROGRAM_WEEKS = "program_weeks"
COLLECTION_PROGRAM_DAYS = "program_days"
COLLECTION_PROGRAM_COHORTS = "program_cohorts"

# Running programs
COLLECTION_PROGRAM_ENROLLMENTS = "program_enrollments"
COLLECTION_PROGRAM_INSTANCES = "program_instances"

# Daily work
COLLECTION_TASKS = "tasks"
COLLECTION_HABITS = "habits"

# Community
COLLECTION_SQUADS = "squads"
COLLECTION_FEED_POSTS = "feed_posts"
COLLECTION_FEED_REACTIONS = "feed_reactions"
COLLECTION_FEED_COMMENTS = "feed_comments"

# Scheduling
COLLECTION_EVENTS = "events"
COLLECTION_COACH_AVAILABILITY = "coach_availability"
COLLECTION_EVENT_SCHEDULED_JOBS = "event_scheduled_jobs"
COLLECTION_INTAKE_CALL_CONFIGS = "intake_call_configs"
COLLECTION_INTAKE_BOOKING_TOKENS = "intake_booking_tokens"

# Billing
COLLECTION_STRIPE_CUSTOMERS = "stripe_connect_customers"
COLLECTION_DISCOUNT_CODES = "discount_codes"
COLLECTION_DISCOUNT_CODE_USAGES = "discount_code_usages"
COLLECTION_INVOICES = "invoices"
