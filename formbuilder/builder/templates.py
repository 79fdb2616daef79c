"""Mitgelieferte Formularvorlagen (contact, registration, survey).

Die Feld-IDs sind fest, damit eine geladene Vorlage reproduzierbar ist.
"""

from typing import Dict, List

from ..core.errors import NotFound
from ..schemas import FormBase, TemplateSummary

_TEMPLATE_DATA = {
    "contact": {
        "title": "Contact Form",
        "description": "Get in touch with us. We usually answer within two business days.",
        "steps": [{"id": 1, "title": "Contact Information", "order": 1}],
        "fields": [
            {
                "id": "contact_name",
                "type": "text",
                "label": "Full Name",
                "placeholder": "Jane Doe",
                "required": True,
                "validation": {"minLength": 2, "maxLength": 100},
                "stepId": 1,
                "order": 1,
            },
            {
                "id": "contact_email",
                "type": "email",
                "label": "Email Address",
                "placeholder": "jane@example.com",
                "required": True,
                "validation": {"pattern": "email"},
                "stepId": 1,
                "order": 2,
            },
            {
                "id": "contact_subject",
                "type": "select",
                "label": "Subject",
                "required": True,
                "options": [
                    {"label": "General Inquiry", "value": "general_inquiry"},
                    {"label": "Support", "value": "support"},
                    {"label": "Feedback", "value": "feedback"},
                ],
                "stepId": 1,
                "order": 3,
            },
            {
                "id": "contact_message",
                "type": "textarea",
                "label": "Message",
                "placeholder": "How can we help?",
                "required": True,
                "validation": {"minLength": 10, "maxLength": 2000},
                "stepId": 1,
                "order": 4,
            },
        ],
        "settings": {
            "allowAnonymous": True,
            "requireAuth": False,
            "emailNotifications": True,
            "submitMessage": "Thanks for reaching out! We'll get back to you soon.",
        },
    },
    "registration": {
        "title": "Event Registration",
        "description": "Register for the upcoming event.",
        "steps": [
            {"id": 1, "title": "Personal Details", "order": 1},
            {"id": 2, "title": "Preferences", "order": 2},
        ],
        "fields": [
            {
                "id": "reg_first_name",
                "type": "text",
                "label": "First Name",
                "required": True,
                "stepId": 1,
                "order": 1,
            },
            {
                "id": "reg_last_name",
                "type": "text",
                "label": "Last Name",
                "required": True,
                "stepId": 1,
                "order": 2,
            },
            {
                "id": "reg_email",
                "type": "email",
                "label": "Email Address",
                "required": True,
                "validation": {"pattern": "email"},
                "stepId": 1,
                "order": 3,
            },
            {
                "id": "reg_phone",
                "type": "phone",
                "label": "Phone Number",
                "validation": {"pattern": "phone"},
                "stepId": 1,
                "order": 4,
            },
            {
                "id": "reg_ticket",
                "type": "radio",
                "label": "Ticket Type",
                "required": True,
                "options": [
                    {"label": "Standard", "value": "standard"},
                    {"label": "VIP", "value": "vip"},
                    {"label": "Student", "value": "student"},
                ],
                "stepId": 2,
                "order": 1,
            },
            {
                "id": "reg_sessions",
                "type": "checkbox",
                "label": "Sessions you plan to attend",
                "options": [
                    {"label": "Morning Keynote", "value": "morning_keynote"},
                    {"label": "Workshops", "value": "workshops"},
                    {"label": "Networking Dinner", "value": "networking_dinner"},
                ],
                "stepId": 2,
                "order": 2,
            },
            {
                "id": "reg_arrival",
                "type": "date",
                "label": "Arrival Date",
                "stepId": 2,
                "order": 3,
            },
            {
                "id": "reg_terms",
                "type": "checkbox",
                "label": "I agree to the terms and conditions",
                "required": True,
                "stepId": 2,
                "order": 4,
            },
        ],
        "settings": {
            "allowAnonymous": True,
            "requireAuth": False,
            "emailNotifications": True,
            "submitMessage": "You're registered! A confirmation email is on its way.",
        },
    },
    "survey": {
        "title": "Customer Satisfaction Survey",
        "description": "Help us improve by sharing your experience.",
        "steps": [
            {"id": 1, "title": "Your Experience", "order": 1},
            {"id": 2, "title": "Details", "order": 2},
            {"id": 3, "title": "Final Thoughts", "order": 3},
        ],
        "fields": [
            {
                "id": "survey_satisfaction",
                "type": "radio",
                "label": "How satisfied are you overall?",
                "required": True,
                "options": [
                    {"label": "Very satisfied", "value": "very_satisfied"},
                    {"label": "Satisfied", "value": "satisfied"},
                    {"label": "Neutral", "value": "neutral"},
                    {"label": "Dissatisfied", "value": "dissatisfied"},
                ],
                "stepId": 1,
                "order": 1,
            },
            {
                "id": "survey_recommend",
                "type": "range",
                "label": "How likely are you to recommend us (0-10)?",
                "required": True,
                "stepId": 1,
                "order": 2,
            },
            {
                "id": "survey_features",
                "type": "checkbox",
                "label": "Which features do you use?",
                "options": [
                    {"label": "Form Builder", "value": "form_builder"},
                    {"label": "Templates", "value": "templates"},
                    {"label": "Response Review", "value": "response_review"},
                ],
                "stepId": 2,
                "order": 1,
            },
            {
                "id": "survey_channel",
                "type": "select",
                "label": "How did you hear about us?",
                "options": [
                    {"label": "Search Engine", "value": "search_engine"},
                    {"label": "Social Media", "value": "social_media"},
                    {"label": "Friend", "value": "friend"},
                ],
                "stepId": 2,
                "order": 2,
            },
            {
                "id": "survey_comments",
                "type": "textarea",
                "label": "Anything else you'd like to tell us?",
                "validation": {"maxLength": 1000},
                "stepId": 3,
                "order": 1,
            },
        ],
        "settings": {
            "allowAnonymous": True,
            "requireAuth": False,
            "emailNotifications": False,
            "submitMessage": "Thank you for your feedback!",
        },
    },
}

TEMPLATES: Dict[str, FormBase] = {
    key: FormBase.model_validate(data) for key, data in _TEMPLATE_DATA.items()
}


def get_template(key: str) -> FormBase:
    """Liefert eine unabhängige Kopie der Vorlage ``key``."""
    template = TEMPLATES.get(key)
    if template is None:
        raise NotFound(f"Template '{key}' not found")
    return template.model_copy(deep=True)


def list_templates() -> List[TemplateSummary]:
    return [
        TemplateSummary(
            key=key,
            title=template.title,
            description=template.description,
            step_count=len(template.steps),
            field_count=len(template.fields),
        )
        for key, template in TEMPLATES.items()
    ]
