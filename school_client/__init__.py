"""
school_client - לקוח async למערכת ניהול מרכז לימוד (ארנק, הכנסות צוות, תשלומי שכר)
"""
__version__ = "1.0.0"
