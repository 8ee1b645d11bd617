from .relay_controller import RelayResponse, TutorRelayController, method_not_allowed_response

__all__ = ["RelayResponse", "TutorRelayController", "method_not_allowed_response"]
