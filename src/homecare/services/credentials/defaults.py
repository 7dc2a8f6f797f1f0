from __future__ import annotations

from typing import List, NamedTuple

from src.homecare.domain.models.credential import CredentialCategory


class CredentialTypeSeed(NamedTuple):
    name: str
    category: CredentialCategory
    description: str
    # 0 means the credential does not expire once obtained.
    default_validity_months: int
    is_required: bool
    required_for_roles: List[str]
    reminder_days: List[int]


# Standard credential types for home care agencies.
DEFAULT_CREDENTIAL_TYPES: List[CredentialTypeSeed] = [
    # Licenses
    CredentialTypeSeed(
        "Certified Nursing Assistant (CNA)",
        CredentialCategory.LICENSE,
        "State-issued certification to provide basic patient care under supervision of nursing staff",
        24, True, ["CARER"], [60, 30, 14, 7],
    ),
    CredentialTypeSeed(
        "Licensed Practical Nurse (LPN)",
        CredentialCategory.LICENSE,
        "State license to practice as a licensed practical/vocational nurse",
        24, False, [], [90, 60, 30, 14],
    ),
    CredentialTypeSeed(
        "Registered Nurse (RN)",
        CredentialCategory.LICENSE,
        "State license to practice as a registered nurse",
        24, False, [], [90, 60, 30, 14],
    ),
    CredentialTypeSeed(
        "Home Health Aide (HHA)",
        CredentialCategory.LICENSE,
        "Certification to provide home health aide services",
        24, False, ["CARER"], [60, 30, 14, 7],
    ),
    CredentialTypeSeed(
        "Driver's License",
        CredentialCategory.LICENSE,
        "Valid driver's license for transportation duties",
        48, False, [], [60, 30, 14],
    ),
    # Certifications
    CredentialTypeSeed(
        "CPR/BLS Certification",
        CredentialCategory.CERTIFICATION,
        "American Heart Association CPR/Basic Life Support certification",
        24, True, ["CARER"], [60, 30, 14, 7],
    ),
    CredentialTypeSeed(
        "First Aid Certification",
        CredentialCategory.CERTIFICATION,
        "Standard first aid certification from accredited provider",
        24, True, ["CARER"], [60, 30, 14, 7],
    ),
    CredentialTypeSeed(
        "AED Certification",
        CredentialCategory.CERTIFICATION,
        "Automated External Defibrillator certification",
        24, False, [], [60, 30, 14],
    ),
    CredentialTypeSeed(
        "Medication Administration Certification",
        CredentialCategory.CERTIFICATION,
        "Certification to administer medications in home care settings",
        12, False, [], [60, 30, 14, 7],
    ),
    # Health requirements
    CredentialTypeSeed(
        "TB Test (PPD/Chest X-Ray)",
        CredentialCategory.HEALTH,
        "Tuberculosis screening - PPD skin test or chest X-ray",
        12, True, ["CARER"], [30, 14, 7],
    ),
    CredentialTypeSeed(
        "Physical Examination",
        CredentialCategory.HEALTH,
        "Annual physical examination clearance for work",
        12, True, ["CARER"], [30, 14, 7],
    ),
    CredentialTypeSeed(
        "Hepatitis B Vaccination",
        CredentialCategory.HEALTH,
        "Hepatitis B vaccination series or declination",
        0, False, [], [],
    ),
    CredentialTypeSeed(
        "Flu Vaccination",
        CredentialCategory.HEALTH,
        "Annual influenza vaccination",
        12, False, [], [30, 14],
    ),
    CredentialTypeSeed(
        "COVID-19 Vaccination",
        CredentialCategory.HEALTH,
        "COVID-19 vaccination record",
        12, False, [], [30, 14],
    ),
    CredentialTypeSeed(
        "Drug Screening",
        CredentialCategory.HEALTH,
        "Pre-employment or periodic drug screening",
        12, False, [], [30, 14],
    ),
    # Training
    CredentialTypeSeed(
        "HIPAA Training",
        CredentialCategory.TRAINING,
        "Health Insurance Portability and Accountability Act training",
        12, True, ["CARER", "STAFF", "SUPERVISOR"], [30, 14, 7],
    ),
    CredentialTypeSeed(
        "Infection Control Training",
        CredentialCategory.TRAINING,
        "Infection prevention and control training",
        12, True, ["CARER"], [30, 14, 7],
    ),
    CredentialTypeSeed(
        "Abuse/Neglect Recognition Training",
        CredentialCategory.TRAINING,
        "Training on recognizing and reporting abuse, neglect, and exploitation",
        12, True, ["CARER", "STAFF", "SUPERVISOR"], [30, 14, 7],
    ),
    CredentialTypeSeed(
        "Fire Safety Training",
        CredentialCategory.TRAINING,
        "Fire safety and emergency evacuation training",
        12, False, [], [30, 14],
    ),
    CredentialTypeSeed(
        "Dementia Care Training",
        CredentialCategory.TRAINING,
        "Specialized training for caring for clients with dementia",
        24, False, [], [60, 30, 14],
    ),
    CredentialTypeSeed(
        "Body Mechanics/Safe Lifting",
        CredentialCategory.TRAINING,
        "Training on proper body mechanics and safe patient handling",
        12, False, ["CARER"], [30, 14],
    ),
    # Compliance
    CredentialTypeSeed(
        "Background Check",
        CredentialCategory.COMPLIANCE,
        "Criminal background check clearance",
        24, True, ["CARER", "STAFF", "SUPERVISOR"], [60, 30, 14],
    ),
    CredentialTypeSeed(
        "OIG/LEIE Exclusion Check",
        CredentialCategory.COMPLIANCE,
        "Office of Inspector General exclusion list verification",
        12, True, ["CARER", "STAFF", "SUPERVISOR"], [30, 14],
    ),
    CredentialTypeSeed(
        "Sex Offender Registry Check",
        CredentialCategory.COMPLIANCE,
        "Sex offender registry clearance",
        24, True, ["CARER"], [60, 30, 14],
    ),
    CredentialTypeSeed(
        "I-9 Employment Verification",
        CredentialCategory.COMPLIANCE,
        "Employment eligibility verification",
        0, True, [], [],
    ),
    CredentialTypeSeed(
        "Auto Insurance",
        CredentialCategory.COMPLIANCE,
        "Valid auto insurance for employees who drive for work",
        12, False, [], [30, 14, 7],
    ),
]
