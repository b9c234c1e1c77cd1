"""Prompt templates for landing page copy generation."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# System prompt: role, goals and output contract
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """You are an expert copywriter specializing in local service business marketing. Your task is to generate compelling, SEO-optimized copy for a landing page that converts visitors into customers.

The Goal: Create copy that:
1. Builds immediate trust and credibility
2. Clearly communicates the value proposition
3. Drives phone calls and inquiries
4. Ranks well for local SEO
5. Feels professional yet approachable

Output ONLY a valid JSON object with the exact structure specified. No markdown, no explanations, no preamble."""

# ---------------------------------------------------------------------------
# User prompt: required JSON structure followed by the business data
# ---------------------------------------------------------------------------

COPY_PROMPT = """Using the business data below, generate landing page copy following this exact JSON structure:

{{
  "hero": {{
    "headline": "8-12 words, benefit-focused, include city if possible",
    "subheadline": "12-20 words, address customer pain point",
    "primaryCtaText": "4-6 words with phone number, e.g. 'Call Now (555) 123-4567'",
    "secondaryCtaText": "2-4 words, e.g. 'Get Free Quote'",
    "trustBadges": ["3 trust signals, 2-4 words each"]
  }},
  "servicesSection": {{
    "tagline": "2-3 words, e.g. 'WHAT WE OFFER'",
    "headline": "4-8 words, benefit-oriented",
    "subheadline": "15-25 words describing service range",
    "services": [
      {{"icon": "LucideIconName", "title": "2-4 words", "description": "20-30 words"}}
    ]
  }},
  "whyChooseUs": {{
    "tagline": "2-3 words",
    "headline": "5-10 words positioning as trusted choice",
    "benefits": [
      {{"icon": "LucideIconName", "title": "2-5 words", "description": "15-25 words"}}
    ]
  }},
  "serviceArea": {{
    "headline": "5-10 words emphasizing local area",
    "hoursHeadline": "2-5 words label for hours",
    "hoursSubtext": "8-15 words about availability",
    "phoneHeadline": "2-4 words above phone"
  }},
  "emergencyCta": {{
    "headline": "3-6 words, urgent",
    "subheadline": "15-25 words reassuring help is available",
    "ctaText": "4-8 words with phone number"
  }},
  "contactSection": {{
    "tagline": "2-3 words",
    "trustBadges": ["5 trust signals, 3-6 words each"],
    "servingNote": "15-25 words geographic statement"
  }},
  "seo": {{
    "title": "50-60 chars for browser/search",
    "description": "150-160 chars meta description with phone",
    "keywords": "10-15 comma-separated keywords",
    "schemaType": "Plumber|Accountant|Chiropractor|HVACBusiness|Electrician|LocalBusiness"
  }},
  "theme": {{
    "primary": "HSL without hsl(), e.g. '224 64% 33%'",
    "primaryDark": "darker variant",
    "accent": "CTA color contrasting with primary",
    "accentHover": "darker accent for hover"
  }}
}}

Available icons: Wrench, Droplets, Flame, Settings, Shield, Clock, Zap, Award, DollarSign, ThumbsUp, Building, Calculator, FileText, TrendingUp, Briefcase, Users, Lock, Heart, Star, MapPin, Thermometer, Wind, Home, CreditCard, CheckCircle, Leaf, Sparkles, Trash2, Warehouse, Headphones, Server, Cloud, Database, Network, Activity, HeartPulse, Baby, Dumbbell

Color guidelines by business type:
- Plumbers: Blue primary, Orange accent (trustworthy, urgent)
- Accountants/Tax: Green primary, Gold accent (professional, prosperous)
- HVAC: Blue primary, Red accent (reliable, temperature)
- Chiropractors: Teal primary, Coral accent (wellness, healing)
- Electricians: Yellow primary, Navy accent (energy, safety)
- Commercial Cleaning: Cyan primary, Green accent (clean, fresh)
- IT Support: Purple primary, Cyan accent (tech, modern)

Business Data:
{business_data}

Generate 6 services and 6 benefits relevant to this business type. Return ONLY the JSON object."""
