import pytest


@pytest.fixture
def diagnosis_payload():
    """A response shaped the way the model is asked to answer."""
    return {
        "potentialConditions": [
            {
                "name": "Common cold",
                "likelihood": "High",
                "description": "A viral infection of the upper respiratory tract.",
                "commonSymptoms": ["cough", "runny nose", "mild fever"],
            },
            {
                "name": "Influenza",
                "likelihood": "Moderate",
                "description": "A contagious respiratory illness caused by influenza viruses.",
                "commonSymptoms": ["fever", "fatigue", "body aches"],
            },
        ],
        "severity": "Medium",
        "recommendation": "Rest, stay hydrated and consider seeing a doctor if symptoms persist.",
        "nextSteps": ["Monitor temperature every 4 hours"],
        "disclaimer": "This is not medical advice. Consult a healthcare professional.",
    }
