"""Built-in workflow templates for barangay document requests."""

from __future__ import annotations

from ..models import WorkflowStepDefinition, WorkflowTemplate

BARANGAY_CLEARANCE = WorkflowTemplate(
    id="workflow-barangay-clearance",
    name="Barangay Clearance Processing",
    description="Standard workflow for processing barangay clearance requests",
    document_type="barangay-clearance",
    version="1.0",
    steps=[
        WorkflowStepDefinition(
            id="step-1",
            name="Initial Review",
            description="Review application completeness and requirements",
            order=1,
            required_role="clerk",
            estimated_duration=0.5,
        ),
        WorkflowStepDefinition(
            id="step-2",
            name="Document Verification",
            description="Verify submitted documents and applicant information",
            order=2,
            required_role="clerk",
            estimated_duration=1,
        ),
        WorkflowStepDefinition(
            id="step-3",
            name="Background Check",
            description="Conduct background verification with local records",
            order=3,
            required_role="officer",
            estimated_duration=4,
        ),
        WorkflowStepDefinition(
            id="step-4",
            name="Approval",
            description="Final approval by authorized personnel",
            order=4,
            required_role="captain",
            estimated_duration=0.5,
        ),
        WorkflowStepDefinition(
            id="step-5",
            name="Document Preparation",
            description="Prepare and print the official document",
            order=5,
            required_role="clerk",
            estimated_duration=0.5,
        ),
        WorkflowStepDefinition(
            id="step-6",
            name="Quality Check",
            description="Final quality check and document signing",
            order=6,
            required_role="secretary",
            estimated_duration=0.25,
        ),
    ],
)

CERTIFICATE_OF_RESIDENCY = WorkflowTemplate(
    id="workflow-certificate-residency",
    name="Certificate of Residency Processing",
    description="Workflow for processing certificate of residency requests",
    document_type="certificate-residency",
    version="1.0",
    steps=[
        WorkflowStepDefinition(
            id="step-1",
            name="Application Review",
            description="Review application and supporting documents",
            order=1,
            required_role="clerk",
            estimated_duration=0.25,
        ),
        WorkflowStepDefinition(
            id="step-2",
            name="Residency Verification",
            description="Verify applicant residency in the barangay",
            order=2,
            required_role="officer",
            estimated_duration=2,
        ),
        WorkflowStepDefinition(
            id="step-3",
            name="Document Preparation",
            description="Prepare the certificate document",
            order=3,
            required_role="clerk",
            estimated_duration=0.5,
        ),
        WorkflowStepDefinition(
            id="step-4",
            name="Final Approval",
            description="Final review and signature",
            order=4,
            required_role="secretary",
            estimated_duration=0.25,
        ),
    ],
)

DEFAULT_TEMPLATES: tuple[WorkflowTemplate, ...] = (
    BARANGAY_CLEARANCE,
    CERTIFICATE_OF_RESIDENCY,
)
