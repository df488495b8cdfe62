"""
Risk Scoring Engine - Remediation Recommendations.

============================================================
PURPOSE
============================================================
Turns compliance key findings into actionable remediation
steps and estimates the total remediation effort.

============================================================
LOOKUP ORDER
============================================================
1. Exact control id in the remediation library
   (e.g. "patch-management")
2. Category slug: lower-cased, whitespace -> "-", first 20
   characters ("Access Control" -> "access-control")
3. Generic recommendation graded by finding priority:
       priority >= 25   P0   30 days   high
       priority >= 20   P1   21 days   medium
       priority >= 15   P2   14 days   medium
       otherwise        P3    7 days   low

============================================================
EFFORT ESTIMATE
============================================================
    total_days < 15   -> low
    total_days > 45   -> high
    otherwise         -> medium
    cost range        -> total_days x 150 .. total_days x 250

============================================================
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .types import ComplianceFinding, Recommendation, RemediationEffort, RemediationEstimate


logger = logging.getLogger(__name__)


CATEGORY_SLUG_LENGTH = 20

LOW_EFFORT_MAX_DAYS = 15       # Below this total: LOW
HIGH_EFFORT_MIN_DAYS = 45      # Above this total: HIGH

DAILY_RATE_LOW = 150
DAILY_RATE_HIGH = 250

# (min finding priority, priority, days, effort), checked in order
GENERIC_GRADES: Tuple[Tuple[int, str, int, RemediationEffort], ...] = (
    (25, "P0", 30, RemediationEffort.HIGH),
    (20, "P1", 21, RemediationEffort.MEDIUM),
    (15, "P2", 14, RemediationEffort.MEDIUM),
    (0, "P3", 7, RemediationEffort.LOW),
)

GENERIC_ACTION_ITEMS: Tuple[str, ...] = (
    "Review control requirements and current implementation",
    "Identify gaps and root causes",
    "Develop remediation plan with timeline",
    "Assign responsibility and track progress",
    "Test and validate remediation",
    "Document evidence of compliance",
)


# ============================================================
# REMEDIATION LIBRARY (ISO 27001)
# ============================================================

REMEDIATION_LIBRARY: Dict[str, Dict[str, Any]] = {
    "access-control": {
        "title": "Implement Comprehensive Access Control Policy",
        "description": (
            "Develop and enforce a formal access control policy that defines roles, "
            "responsibilities, and access approval procedures. Review all user access regularly."
        ),
        "priority": "P0",
        "effort": RemediationEffort.HIGH,
        "days": 30,
        "action_items": (
            "Conduct access control audit across all systems",
            "Document current access rights and identify excess privileges",
            "Develop role-based access control (RBAC) model",
            "Implement principle of least privilege",
            "Establish quarterly access review process",
            "Create user access request and approval workflow",
        ),
    },
    "user-authentication": {
        "title": "Strengthen User Authentication Mechanisms",
        "description": (
            "Implement multi-factor authentication for all systems, especially critical and "
            "remote access. Enforce strong password policies and monitor authentication logs."
        ),
        "priority": "P0",
        "effort": RemediationEffort.MEDIUM,
        "days": 21,
        "action_items": (
            "Deploy multi-factor authentication across all systems",
            "Enforce strong password policy (min 12 chars, complexity)",
            "Implement account lockout after failed attempts",
            "Monitor and alert on authentication failures",
            "Review and update authentication for legacy systems",
            "Provide user training on MFA and password security",
        ),
    },
    "password-management": {
        "title": "Establish Password Management System",
        "description": (
            "Implement automated password management with enforced policies. Prevent reuse, "
            "require complexity and rotate passwords regularly."
        ),
        "priority": "P1",
        "effort": RemediationEffort.MEDIUM,
        "days": 14,
        "action_items": (
            "Deploy password manager or identity system",
            "Enforce minimum password age (24 hours)",
            "Enforce maximum password age (90 days)",
            "Prevent password reuse (last 5 passwords)",
            "Implement password history tracking",
            "Conduct password policy audit and user training",
        ),
    },
    "cryptography": {
        "title": "Implement Cryptographic Controls",
        "description": (
            "Encrypt data at rest and in transit with industry-standard algorithms and manage "
            "cryptographic keys through their full lifecycle."
        ),
        "priority": "P0",
        "effort": RemediationEffort.HIGH,
        "days": 45,
        "action_items": (
            "Conduct encryption assessment across systems",
            "Implement TLS 1.2+ for all network communications",
            "Deploy AES-256 encryption for data at rest",
            "Establish cryptographic key management system",
            "Create key rotation schedule (annual minimum)",
            "Implement hardware security modules (HSM) for key storage",
        ),
    },
    "physical-security": {
        "title": "Strengthen Physical Security Controls",
        "description": (
            "Secure facilities with access controls, surveillance and environmental monitoring. "
            "Protect hardware from unauthorized access and environmental hazards."
        ),
        "priority": "P1",
        "effort": RemediationEffort.HIGH,
        "days": 60,
        "action_items": (
            "Install and maintain physical access controls (badge readers)",
            "Deploy CCTV monitoring in data centers and server rooms",
            "Implement environmental monitoring (temperature, humidity)",
            "Restrict physical access to sensitive areas",
            "Establish visitor management and badging procedures",
            "Schedule regular physical security audits",
        ),
    },
    "asset-management": {
        "title": "Implement Asset Management Program",
        "description": (
            "Maintain an inventory of all IT assets with owner, location and status, and "
            "control asset disposal and end-of-life."
        ),
        "priority": "P1",
        "effort": RemediationEffort.MEDIUM,
        "days": 28,
        "action_items": (
            "Create complete IT asset inventory with unique identifiers",
            "Assign asset owners and track accountability",
            "Implement asset tracking system or database",
            "Establish asset disposal procedures",
            "Conduct quarterly asset audits",
            "Implement barcode or RFID tracking system",
        ),
    },
    "configuration-management": {
        "title": "Establish Configuration Management System",
        "description": (
            "Maintain baseline configurations for all systems and monitor them under change "
            "management to prevent unauthorized modifications."
        ),
        "priority": "P1",
        "effort": RemediationEffort.HIGH,
        "days": 35,
        "action_items": (
            "Document baseline configurations for all critical systems",
            "Implement configuration management database (CMDB)",
            "Deploy configuration monitoring tools",
            "Establish change advisory board (CAB)",
            "Implement change tracking and approval workflow",
            "Conduct regular configuration audits",
        ),
    },
    "patch-management": {
        "title": "Implement Patch Management Program",
        "description": (
            "Automate patching across all systems. Test patches in staging and deploy within "
            "timeframes set by criticality."
        ),
        "priority": "P0",
        "effort": RemediationEffort.MEDIUM,
        "days": 21,
        "action_items": (
            "Deploy automated patch management system",
            "Establish patch testing environment",
            "Define patch deployment schedules by criticality",
            "Monitor vendors for security patches",
            "Maintain patch inventory and deployment records",
            "Conduct monthly patch compliance audits",
        ),
    },
    "incident-management": {
        "title": "Develop Incident Response Program",
        "description": (
            "Create formal incident detection, reporting and resolution procedures, staff an "
            "incident response team and run regular drills."
        ),
        "priority": "P0",
        "effort": RemediationEffort.HIGH,
        "days": 40,
        "action_items": (
            "Develop incident response plan (IRP) and procedures",
            "Establish incident response team with defined roles",
            "Create incident classification and severity matrix",
            "Implement incident ticketing and tracking system",
            "Create incident response playbooks for common scenarios",
            "Conduct quarterly incident response drills and tabletops",
        ),
    },
    "backup-recovery": {
        "title": "Implement Backup and Disaster Recovery Program",
        "description": (
            "Back up all critical data automatically, keep offsite copies and test recovery "
            "procedures regularly."
        ),
        "priority": "P0",
        "effort": RemediationEffort.HIGH,
        "days": 45,
        "action_items": (
            "Conduct business impact analysis (BIA) and RTO/RPO assessment",
            "Deploy automated backup solution for all critical systems",
            "Implement daily incremental and weekly full backups",
            "Store backup copies offsite or in separate cloud region",
            "Encrypt all backups at rest and in transit",
            "Test backup restoration quarterly",
        ),
    },
    "business-continuity": {
        "title": "Develop Business Continuity Plan",
        "description": (
            "Create business continuity and disaster recovery plans with recovery procedures "
            "and critical function priorities."
        ),
        "priority": "P1",
        "effort": RemediationEffort.HIGH,
        "days": 60,
        "action_items": (
            "Conduct business impact analysis (BIA)",
            "Develop business continuity plan (BCP)",
            "Establish recovery time objectives (RTO) and recovery point objectives (RPO)",
            "Create alternate processing site or redundancy",
            "Establish communication procedures during incidents",
            "Conduct annual BCP exercises and updates",
        ),
    },
    "security-training": {
        "title": "Implement Mandatory Security Awareness Program",
        "description": (
            "Train all employees on phishing, password security, data handling and incident "
            "reporting."
        ),
        "priority": "P1",
        "effort": RemediationEffort.MEDIUM,
        "days": 14,
        "action_items": (
            "Develop mandatory security awareness curriculum",
            "Conduct annual training for all employees",
            "Create role-specific security training modules",
            "Implement phishing simulation campaigns",
            "Track training completion and assessment scores",
            "Provide monthly security awareness updates",
        ),
    },
    "vulnerability-management": {
        "title": "Establish Vulnerability Management Program",
        "description": (
            "Scan systems for vulnerabilities on a schedule, then track, prioritize and "
            "remediate findings within severity-based timelines."
        ),
        "priority": "P1",
        "effort": RemediationEffort.MEDIUM,
        "days": 28,
        "action_items": (
            "Deploy vulnerability scanning tools",
            "Conduct quarterly vulnerability assessments",
            "Establish vulnerability rating and prioritization process",
            "Define remediation timelines (critical: 30 days)",
            "Implement vulnerability tracking system",
            "Conduct annual penetration testing",
        ),
    },
    "access-logging": {
        "title": "Implement Comprehensive Audit Logging",
        "description": (
            "Enable and retain audit logs for all systems, store them securely and monitor "
            "them for suspicious activity."
        ),
        "priority": "P1",
        "effort": RemediationEffort.MEDIUM,
        "days": 21,
        "action_items": (
            "Enable audit logging on all systems",
            "Centralize logs to SIEM or log aggregation system",
            "Implement log retention (min 1 year)",
            "Establish log integrity protection and monitoring",
            "Create alerts for suspicious activities",
            "Conduct monthly log reviews and analysis",
        ),
    },
    "data-classification": {
        "title": "Implement Data Classification Scheme",
        "description": (
            "Define data classification levels and apply controls by data sensitivity and "
            "regulatory requirements."
        ),
        "priority": "P1",
        "effort": RemediationEffort.MEDIUM,
        "days": 21,
        "action_items": (
            "Define data classification scheme (public, internal, confidential, restricted)",
            "Classify existing data inventory",
            "Document classification guidance and examples",
            "Implement technical controls based on classification",
            "Train employees on data classification",
            "Conduct annual data classification review",
        ),
    },
    "network-segmentation": {
        "title": "Implement Network Segmentation",
        "description": (
            "Segment networks by trust level and data sensitivity, with firewalls and access "
            "controls between segments."
        ),
        "priority": "P0",
        "effort": RemediationEffort.HIGH,
        "days": 45,
        "action_items": (
            "Map current network topology",
            "Design network segmentation strategy",
            "Implement firewall rules between segments",
            "Deploy intrusion detection/prevention systems",
            "Implement VLANs for logical segmentation",
            "Monitor and audit network traffic between segments",
        ),
    },
    "third-party-risk": {
        "title": "Establish Third-party Risk Management Program",
        "description": (
            "Assess and monitor the security controls of vendors and suppliers, and put "
            "security requirements into their contracts."
        ),
        "priority": "P1",
        "effort": RemediationEffort.HIGH,
        "days": 45,
        "action_items": (
            "Create vendor risk assessment questionnaire",
            "Assess current vendors for security controls",
            "Establish vendor security requirements in contracts",
            "Implement vendor performance monitoring",
            "Conduct annual vendor security audits",
            "Maintain vendor risk register and tracking system",
        ),
    },
}


# ============================================================
# RECOMMENDATIONS
# ============================================================


def category_slug(category: str) -> str:
    """Library key for a category name."""
    return re.sub(r"\s+", "-", category.lower())[:CATEGORY_SLUG_LENGTH]


def _library_entry(finding: ComplianceFinding) -> Optional[Dict[str, Any]]:
    entry = REMEDIATION_LIBRARY.get(str(finding.control_id))
    if entry is None:
        entry = REMEDIATION_LIBRARY.get(category_slug(finding.category))
    return entry


def _generic_entry(finding: ComplianceFinding) -> Dict[str, Any]:
    for min_priority, priority, days, effort in GENERIC_GRADES:
        if finding.priority >= min_priority:
            break
    return {
        "title": f"Remediate {finding.control_id} ({finding.category}) Gap",
        "description": (
            f"Address the {finding.status} status of control {finding.control_id}. "
            f"Implement the controls and procedures needed for full compliance with this requirement."
        ),
        "priority": priority,
        "effort": effort,
        "days": days,
        "action_items": GENERIC_ACTION_ITEMS,
    }


def recommend(finding: ComplianceFinding) -> Recommendation:
    """Remediation recommendation for one finding."""
    entry = _library_entry(finding)
    if entry is None:
        logger.debug(f"No library remediation for {finding.control_id} ({finding.category}), using generic")
        entry = _generic_entry(finding)

    return Recommendation(
        control_id=finding.control_id,
        finding_id=f"{finding.control_id}-rec",
        title=entry["title"],
        description=entry["description"],
        priority=entry["priority"],
        estimated_effort=entry["effort"],
        estimated_days=entry["days"],
        action_items=entry["action_items"],
    )


def generate_recommendations(findings: Iterable[ComplianceFinding]) -> Tuple[Recommendation, ...]:
    """
    One recommendation per distinct control, in finding order.

    Args:
        findings: Key findings of a compliance scoring run

    Returns:
        Tuple of Recommendation
    """
    recommendations: List[Recommendation] = []
    seen: Set[str] = set()

    for finding in findings:
        key = str(finding.control_id)
        if key in seen:
            continue
        seen.add(key)
        recommendations.append(recommend(finding))

    return tuple(recommendations)


def estimate_remediation_effort(recommendations: Iterable[Recommendation]) -> RemediationEstimate:
    """Total days, effort level and cost range of a set of recommendations."""
    total_days = sum(r.estimated_days for r in recommendations)

    if total_days < LOW_EFFORT_MAX_DAYS:
        effort_level = RemediationEffort.LOW
    elif total_days > HIGH_EFFORT_MIN_DAYS:
        effort_level = RemediationEffort.HIGH
    else:
        effort_level = RemediationEffort.MEDIUM

    return RemediationEstimate(
        total_days=total_days,
        effort_level=effort_level,
        cost_low=total_days * DAILY_RATE_LOW,
        cost_high=total_days * DAILY_RATE_HIGH,
    )
