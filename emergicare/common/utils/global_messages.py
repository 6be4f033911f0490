class GlobalMessages:
    # Auth Messages
    INVALID_CREDENTIALS = "Could not validate credentials. Please log in again."
    PROFILE_REQUIRED = "Complete your profile before using this feature."
    PATIENTS_ONLY = "Only patients can request consultations."
    DOCTORS_ONLY = "Only doctors can perform this action."
    DOCTOR_PROFILE_REQUIRED = "Complete your doctor profile before accepting consultations."
    NOT_FOUND = "The requested record was not found."

    # Profile Messages
    PROFILE_EXISTS = "A profile already exists for this account."

    # Doctor Messages
    LICENSE_TAKEN = "This license number is already registered."

    # Consultation Messages
    SYMPTOMS_REQUIRED = "Please describe your symptoms."
    CONSULTATION_REQUESTED = "Your consultation request has been submitted. A doctor will be assigned shortly."
    CONSULTATION_CLAIMED = "Consultation accepted."
    ALREADY_CLAIMED = "This consultation has already been claimed by another doctor."
    CONSULTATION_STARTED = "Consultation started."
    CONSULTATION_COMPLETED = "Consultation completed."
    CONSULTATION_CANCELLED = "Consultation cancelled."
    CONSULTATION_UPDATED = "Consultation updated successfully."
    NOTES_UPDATED = "Notes saved."
    STATE_CHANGED = "This consultation changed in the meantime. Refresh and try again."
    CONSULTATION_CLOSED = "This consultation is closed and can no longer be edited."
