"""Per-category configuration table for the document generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from textwrap import dedent
from typing import Dict, Mapping, Tuple

from .keypoints import KeyPointRule, keywords, pattern
from .schemas import DocumentCategory


@dataclass(frozen=True)
class CategoryConfig:
    """Everything that distinguishes one guide from another."""

    category: DocumentCategory
    title: str
    pdf_title: str
    color: str
    prompt: str
    closing: str
    rules: Tuple[KeyPointRule, ...]
    fallbacks: Tuple[str, ...]
    temperature: float = 0.7
    max_tokens: int = 3500
    field_defaults: Mapping[str, str] = field(default_factory=dict)


REGISTRATION_PROMPT = dedent(
    """
    You are an expert business registration consultant in India. Generate a comprehensive registration guide based on the business profile provided.

    IMPORTANT: Analyze the business description and location to intelligently determine:
    - The specific industry sector (e.g., Technology/Software, Retail/E-commerce, Food & Beverage, Healthcare, Education, Manufacturing, etc.)
    - The most appropriate business entity type based on the business size, partners, and industry
    - Location-specific registration requirements and processes

    The guide MUST include:

    1. **Recommended Entity Type** - Analyze the business and recommend the best entity type (Proprietorship, Partnership, LLP, Private Limited, etc.) with clear reasoning

    2. **Company Name Suggestions** - Provide 3-4 suitable name suggestions based on the business description
       - Check name availability: https://www.mca.gov.in/mcafoportal/companyLLPNameAvailability.do
       - Trademark search: https://ipindiaservices.gov.in/publicsearch

    3. **Complete Registration Timeline** - Day-by-day process tailored to the business profile:
       - Day 1-2: Apply for DSC (Digital Signature Certificate)
       - Day 3-4: Apply for DIN/DPIN
       - Day 5: Reserve company name (RUN form)
       - Day 6-15: File incorporation forms (SPICe+ for company/LLP)
       - Day 16: Receive Certificate of Incorporation
       - Day 17-20: Apply for PAN and TAN
       - Day 21-25: Open bank account
       - Day 26-30: GST registration (if turnover > ₹40 lakhs for services or ₹20 lakhs for goods)

    4. **Required Documents Checklist**
       For Directors/Partners:
       - PAN Card (mandatory)
       - Aadhaar Card
       - Passport size photographs
       - Address proof
       - Bank statements (last 2 months)

       For Registered Office:
       - Rent agreement / NOC from owner
       - Utility bills (last 2 months)
       - Property documents

    5. **Cost Breakdown** (based on entity type and location):
       - Government Fees
       - Professional Fees (optional)
       - DSC and other costs
       - Total estimated cost

    6. **Official Government Portals** relevant to this business:
       - MCA Portal: https://www.mca.gov.in/mcafoportal/
       - DSC Application: https://www.mca.gov.in/MinistryV2/digitalsignature.html
       - Name Availability: https://www.mca.gov.in/mcafoportal/companyLLPNameAvailability.do
       - Trademark Search: https://ipindiaservices.gov.in/publicsearch

    7. **Post-Registration Compliance**:
       - Annual ROC filings (Form AOC-4, MGT-7, etc.)
       - GST returns (monthly/quarterly)
       - Income tax returns
       - Board meetings and AGM requirements

    8. **Brand Protection**:
       - Trademark registration steps
       - Domain name registration
       - Copyright for creative content

    Format the response in clean markdown with proper headers, bullet points, and sections.
    """
).strip()


COMPLIANCE_PROMPT = dedent(
    """
    You are an expert compliance and legal consultant for businesses in India. Generate a comprehensive compliance guide based on the business profile provided.

    IMPORTANT: Analyze the business description, industry, and location to provide:
    - Industry-specific compliance requirements (e.g., FSSAI for food, RERA for real estate, etc.)
    - Location-specific state regulations and registrations
    - Entity-type specific compliance obligations
    - Scale-appropriate compliance recommendations based on business size

    The guide MUST include:

    1. **Tax Compliance**
       - PAN and TAN requirements
       - GST registration (threshold, process, timeline)
       - TDS compliance and filing requirements
       - Income Tax return filing schedule
       - Professional Tax (state-specific)
       - Advance tax payment schedule

    2. **ROC Compliance (for Companies/LLPs)**
       - Annual Filing Requirements (AOC-4, MGT-7, etc.)
       - Board Meeting requirements (frequency, quorum)
       - Annual General Meeting (AGM) guidelines
       - Financial statement filing
       - Director KYC (DIN KYC)
       - Statutory audit requirements

    3. **Labor Law Compliance**
       - Provident Fund (PF) - when applicable
       - Employee State Insurance (ESI) - when applicable
       - Professional Tax registration
       - Shops and Establishment Act registration
       - Contract Labor Act (if applicable)
       - Minimum wages compliance

    4. **Industry-Specific Licenses and Permits**
       - Trade license from municipal corporation
       - Industry-specific licenses (based on business type)
       - Environmental clearances (if applicable)
       - Fire safety NOC
       - Health and safety compliance

    5. **Data Protection and Privacy**
       - Digital Personal Data Protection Act compliance
       - Data storage and security requirements
       - Privacy policy requirements
       - Customer consent management

    6. **Ongoing Compliance Calendar**
       - Monthly, quarterly and annual compliance tasks
       - Important deadlines and due dates

    7. **Penalties and Consequences**
       - Late filing penalties
       - Non-compliance consequences
       - Interest on delayed tax payments

    8. **Compliance Costs**
       - Professional fees (CA, CS, lawyers)
       - Registration and license fees
       - Annual maintenance costs
       - Estimated total compliance budget

    9. **Resources and Portals**
       - Income Tax Portal: https://www.incometax.gov.in/
       - GST Portal: https://www.gst.gov.in/
       - MCA Portal: https://www.mca.gov.in/
       - EPFO Portal: https://www.epfindia.gov.in/
       - ESI Portal: https://www.esic.gov.in/

    Format the response in clean markdown with proper headers, bullet points, checklists, and actionable steps. Include location-specific compliance based on the business location provided.
    """
).strip()


BRANDING_PROMPT = dedent(
    """
    You are an expert brand strategist and visual identity designer. Generate a comprehensive branding guide based on the business profile and preferences provided.

    IMPORTANT: Analyze the business description, industry, and style preferences to create:
    - Brand concepts that align with the industry standards and target audience
    - Color palettes that match the specified color preference
    - Design styles that reflect the specified style preference
    - Industry-appropriate visual elements and messaging

    The guide MUST include:

    1. **Brand Name Suggestions** - 5-7 options with rationale, domain and trademark considerations
    2. **Brand Identity Overview** - positioning statement, target audience, personality and tone, core values
    3. **Logo Design Concept** - primary concept, variations (horizontal, vertical, icon-only), usage and clear space
    4. **Color Palette** - 3-4 primary colors with HEX, RGB and CMYK values, 2-3 secondary colors, usage guidelines
    5. **Typography System** - heading and body typefaces, weights, sizes and hierarchy
    6. **Brand Applications** - business card, letterhead, email signature, social media, website direction
    7. **Visual Style Guidelines** - photography, iconography, graphic elements, do's and don'ts
    8. **Brand Voice and Messaging** - tone of voice, messaging pillars, 3-4 tagline options, sample copy
    9. **Intellectual Property Protection** - trademark process and classes, copyright, domains, timeline and costs
    10. **Implementation Roadmap**
       - Phase 1: Logo and basic identity (Week 1-2)
       - Phase 2: Marketing collateral (Week 3-4)
       - Phase 3: Digital presence (Week 5-6)
       - Phase 4: Brand rollout (Week 7-8)

    Format the response in clean markdown with proper headers, bullet points, and visual descriptions. Be specific and actionable.
    """
).strip()


HR_PROMPT = dedent(
    """
    You are an expert HR consultant specializing in startup and SME human resources management in India. Generate a comprehensive HR setup guide based on the business profile provided.

    IMPORTANT: Analyze the business description, industry, and team size to provide:
    - Industry-appropriate organizational structures and roles
    - Compensation benchmarks specific to the industry and location
    - HR policies tailored to the business type and culture
    - Hiring roadmaps aligned with business growth stage

    The guide MUST include:

    1. **Organizational Structure** - org chart, key roles, reporting structure, phased hiring roadmap
    2. **Employment Documentation** - offer letter, employment agreement, appointment letter, probation, notice period, NDA, non-compete
    3. **HR Policies** - leave, work hours and attendance, remote work, code of conduct, anti-harassment, grievance redressal, performance review, disciplinary action
    4. **Compensation and Benefits** - salary components (basic, HRA, special allowance), benchmarking, variable pay, reimbursements, insurance, retirement benefits (PF, gratuity)
    5. **Payroll Management** - processing timeline, statutory deductions (PF, PT, TDS), payslip format, Form 16, payroll software
    6. **Onboarding Process** - pre-joining checklist, day 1 agenda, first week orientation, 30-60-90 day goals, buddy assignment, training plan
    7. **Performance Management** - OKRs/KPIs, review cycle, feedback, promotion criteria, improvement plans
    8. **Employee Engagement** - team building, recognition, communication channels, surveys, exit interviews
    9. **Legal Compliance** - minimum wages, payment of wages, gratuity, maternity benefit, POSH Act, contract labor
    10. **HR Technology Stack** - HRMS, attendance and leave tools, payroll software, recruitment platforms, engagement tools
    11. **Cost Planning** - per-employee cost, software, recruitment, training budget, total HR budget

    Format the response in clean markdown with proper headers, templates, checklists, and actionable guidelines. Make it practical and ready-to-implement.
    """
).strip()


REGISTRATION = CategoryConfig(
    category=DocumentCategory.REGISTRATION,
    title="Registration Guide",
    pdf_title="Company Registration Guide",
    color="#3B82F6",
    prompt=REGISTRATION_PROMPT,
    closing="Generate a comprehensive registration guide for this business.",
    max_tokens=3000,
    field_defaults={"business_name": "To be determined"},
    rules=(
        KeyPointRule(
            point="Recommended: {0}",
            pattern=pattern(r"(?:recommended|suggested|suggest|best)\s+entity\s+type[:\s\-]*([^\n.]+)"),
            group="entity",
            min_capture_length=6,
        ),
        KeyPointRule(
            point="Recommended: {0}",
            pattern=pattern(r"entity\s+type[:\s\-]*([^\n.]+?)(?:based|for|with)"),
            group="entity",
            min_capture_length=6,
        ),
        KeyPointRule(
            point="Recommended: {0}",
            pattern=pattern(
                r"\b(sole proprietorship|limited liability partnership|private limited company"
                r"|private limited|public limited|partnership firm|one person company)\b"
            ),
            group="entity",
        ),
        KeyPointRule(
            point="Recommended: {0}",
            pattern=pattern(r"\b(proprietorship|partnership|llp|private limited|public limited)\b"),
            group="entity",
            min_capture_length=6,
        ),
        KeyPointRule(
            point="Registration timeline: {0} days",
            pattern=pattern(r"(\d+\s*[-–]\s*\d+)\s*days?\b"),
            group="timeline",
        ),
        KeyPointRule(
            point="Registration timeline: {0} days",
            pattern=pattern(r"timeline[:\s]*(\d+\s*(?:to|-)\s*\d+)\s*days?\b"),
            group="timeline",
        ),
        KeyPointRule(
            point="Registration timeline: {0} days",
            pattern=pattern(r"(?:takes?|requires?)\s*(\d+)\s*days?\b"),
            group="timeline",
        ),
        KeyPointRule(
            point="Complete step-by-step registration timeline",
            keywords=keywords("day 1", "timeline"),
            group="timeline",
        ),
        KeyPointRule(
            point="Estimated cost: ₹{0}",
            pattern=pattern(r"(?:total|estimated|approximate)\s*cost[^\d₹\n]{0,20}₹\s*([\d,]+)"),
            group="cost",
        ),
        KeyPointRule(
            point="Estimated cost: ₹{0}-{1}",
            pattern=pattern(r"₹\s*([\d,]+)\s*(?:to|-|–)\s*₹?\s*([\d,]+)"),
            group="cost",
        ),
        KeyPointRule(
            point="Estimated cost: ₹{0}",
            pattern=pattern(r"\bcost[:\s]*₹?\s*(\d[\d,]*)"),
            group="cost",
        ),
        KeyPointRule(
            point="Detailed cost breakdown included",
            keywords=keywords("cost", "fee"),
            group="cost",
        ),
        KeyPointRule(
            point="Required documents checklist provided",
            keywords=keywords("document"),
            also=keywords("checklist"),
            group="documents",
        ),
        KeyPointRule(
            point="Complete documentation requirements",
            keywords=keywords("aadhaar"),
            pattern=pattern(r"\bpan\b"),
            group="documents",
        ),
        KeyPointRule(
            point="Official government portal links included",
            keywords=keywords("mca.gov.in", "government portal"),
        ),
        KeyPointRule(
            point="Post-registration compliance guide",
            keywords=keywords("post-registration", "compliance"),
        ),
    ),
    fallbacks=(
        "Step-by-step registration process",
        "Entity type recommendations",
        "Complete documentation guide",
        "Timeline and milestones",
        "Cost estimates and fees",
        "Compliance requirements",
    ),
)


COMPLIANCE = CategoryConfig(
    category=DocumentCategory.COMPLIANCE,
    title="Compliance Guide",
    pdf_title="Compliance & Legal Guide",
    color="#10B981",
    prompt=COMPLIANCE_PROMPT,
    closing="Generate a comprehensive compliance guide for this business covering all regulatory requirements in India.",
    rules=(
        KeyPointRule(
            point="Complete tax compliance checklist (GST, TDS, Income Tax)",
            keywords=keywords("gst", "tds", "income tax", "tax compliance"),
        ),
        KeyPointRule(
            point="ROC annual filing requirements and deadlines",
            keywords=keywords("annual filing", "aoc-4", "mgt-7"),
            pattern=pattern(r"\broc\b"),
        ),
        KeyPointRule(
            point="Labor law compliance (PF, ESI, Professional Tax)",
            keywords=keywords(
                "provident fund", "employee state insurance", "esic", "professional tax", "labor law", "labour law"
            ),
            pattern=pattern(r"\b(?:pf|esi)\b"),
        ),
        KeyPointRule(
            point="Industry-specific licenses and permits guide",
            keywords=keywords("license", "licence", "permit"),
        ),
        KeyPointRule(
            point="Compliance calendar with key deadlines",
            keywords=keywords("monthly", "quarterly", "calendar", "deadline"),
        ),
        KeyPointRule(
            point="Compliance costs and professional fees breakdown",
            keywords=keywords("cost", "fee", "professional charges"),
        ),
        KeyPointRule(
            point="Data protection and privacy compliance",
            keywords=keywords("data protection", "privacy", "dpdp"),
        ),
        KeyPointRule(
            point="Penalties and consequences overview",
            keywords=keywords("penalt", "late filing"),
        ),
    ),
    fallbacks=(
        "Essential tax compliance requirements",
        "Statutory filing obligations",
        "Employee benefit regulations",
        "Business license requirements",
        "Ongoing compliance timeline",
        "Regulatory cost estimates",
    ),
)


BRANDING = CategoryConfig(
    category=DocumentCategory.BRANDING,
    title="Branding Guide",
    pdf_title="Branding Strategy Guide",
    color="#9333EA",
    prompt=BRANDING_PROMPT,
    closing="Generate a comprehensive branding guide for this business that aligns with their preferences.",
    temperature=0.8,
    field_defaults={"color_preference": "Professional", "style_preference": "Modern/Contemporary"},
    rules=(
        KeyPointRule(
            point="Professional color palette with HEX/RGB values",
            keywords=keywords("primary color", "color palette", "colour palette"),
            pattern=pattern(r"#[0-9a-f]{6}\b|rgb\s*\("),
            group="palette",
        ),
        KeyPointRule(
            point="Comprehensive color scheme guide",
            keywords=keywords("color", "colour"),
            group="palette",
        ),
        KeyPointRule(
            point="Complete logo design with variations",
            keywords=keywords("logo", "brand mark"),
            also=keywords("variation", "horizontal", "vertical"),
            group="logo",
        ),
        KeyPointRule(
            point="Logo design concept included",
            keywords=keywords("logo", "brand mark"),
            group="logo",
        ),
        KeyPointRule(
            point="Typography system and font recommendations",
            keywords=keywords("typography", "typeface", "font", "heading", "body text"),
        ),
        KeyPointRule(
            point="Brand collateral designs (cards, letterhead)",
            keywords=keywords("business card", "letterhead", "email signature", "collateral", "stationery"),
        ),
        KeyPointRule(
            point="Brand voice and messaging guidelines",
            keywords=keywords("brand voice", "messaging", "tone of voice", "tagline"),
        ),
        KeyPointRule(
            point="IP protection and trademark registration guide",
            keywords=keywords("trademark", "intellectual property", "ip protection", "copyright"),
        ),
        KeyPointRule(
            point="Visual style and design guidelines",
            keywords=keywords("visual", "photography", "iconography"),
        ),
    ),
    fallbacks=(
        "Brand identity overview",
        "Logo design concepts",
        "Color system guidelines",
        "Typography specifications",
        "Marketing collateral designs",
        "Implementation roadmap",
    ),
)


HR = CategoryConfig(
    category=DocumentCategory.HR,
    title="HR Setup Guide",
    pdf_title="HR Setup Guide",
    color="#F97316",
    prompt=HR_PROMPT,
    closing="Generate a comprehensive HR setup guide for this business covering policies, documentation, and compliance.",
    rules=(
        KeyPointRule(
            point="Complete employment documentation templates",
            keywords=keywords("offer letter", "appointment letter", "employment agreement", "nda", "documentation"),
        ),
        KeyPointRule(
            point="Essential HR policies (leave, attendance, conduct)",
            keywords=keywords("leave policy", "attendance", "code of conduct", "hr polic", "work hours"),
        ),
        KeyPointRule(
            point="Salary structure and compensation guidelines",
            keywords=keywords("salary", "compensation", "pay structure", "wages", "benefits"),
        ),
        KeyPointRule(
            point="Payroll processing and statutory compliance",
            keywords=keywords("payroll", "provident fund", "tds", "payslip", "statutory"),
            pattern=pattern(r"\bpf\b"),
        ),
        KeyPointRule(
            point="Structured onboarding process",
            keywords=keywords("onboarding", "orientation", "joining process"),
        ),
        KeyPointRule(
            point="Performance management framework",
            keywords=keywords("performance", "appraisal", "review", "kpi", "okr", "goal setting"),
        ),
        KeyPointRule(
            point="Organizational structure recommendations",
            keywords=keywords("org"),
            also=keywords("chart", "structure", "hierarchy"),
        ),
        KeyPointRule(
            point="HR technology and tools recommendations",
            keywords=keywords("hrms", "software", "tool", "technology"),
        ),
        KeyPointRule(
            point="Legal compliance requirements",
            keywords=keywords(
                "minimum wages", "gratuity", "maternity", "posh", "compliance", "labor law", "labour law"
            ),
        ),
        KeyPointRule(
            point="Employee engagement strategies",
            keywords=keywords("engagement", "team building", "recognition"),
        ),
    ),
    fallbacks=(
        "Employment contract templates",
        "Core HR policy framework",
        "Compensation and benefits structure",
        "Statutory compliance guide",
        "Employee lifecycle management",
        "HR systems and processes",
    ),
)


CATEGORIES: Dict[DocumentCategory, CategoryConfig] = {
    config.category: config for config in (REGISTRATION, BRANDING, COMPLIANCE, HR)
}


def get_category(category: DocumentCategory | str) -> CategoryConfig:
    """Return the configuration record for ``category``."""

    return CATEGORIES[DocumentCategory(category)]
