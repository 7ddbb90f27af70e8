from decimal import Decimal

from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LAMPORTS_PER_SOL = 1_000_000_000

CONFIRM_SERVICES = ("NOZOMI", "ZERO_SLOT", "JITO")


class WalletSettings(BaseModel):
    private_key: str = ""  # Base58 secret key — NEVER LOG THIS

    model_config = {"frozen": True}


class GrpcSettings(BaseModel):
    # Yellowstone Geyser endpoint, e.g. https://laserstream-mainnet.helius-rpc.com:443
    endpoint: str = ""
    token: str = ""

    model_config = {"frozen": True}


class TradeSettings(BaseModel):
    buy_sol_amount: float = 0.01
    third_party_fee: float = 0.0  # SOL

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _warn_out_of_range(self) -> "TradeSettings":
        if self.buy_sol_amount < 0.0001:
            logger.warning(f"[CONFIG] Buy amount too small: {self.buy_sol_amount} SOL (minimum 0.0001)")
        if self.buy_sol_amount > 10.0:
            logger.warning(f"[CONFIG] Buy amount too large: {self.buy_sol_amount} SOL (maximum 10)")
        if not 0.0 <= self.third_party_fee <= 1.0:
            logger.warning(f"[CONFIG] Third party fee out of range: {self.third_party_fee} (0.0-1.0)")
        return self

    @property
    def buy_lamports(self) -> int:
        return int(Decimal(str(self.buy_sol_amount)) * LAMPORTS_PER_SOL)


class PriorityFeeSettings(BaseModel):
    cu: int = 200_000
    priority_fee_micro_lamport: int = 100

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _warn_out_of_range(self) -> "PriorityFeeSettings":
        if not 50_000 <= self.cu <= 1_400_000:
            logger.warning(f"[CONFIG] Compute units out of recommended range: {self.cu} (50k-1.4M)")
        if not 1 <= self.priority_fee_micro_lamport <= 1000:
            logger.warning(
                f"[CONFIG] Priority fee out of recommended range: "
                f"{self.priority_fee_micro_lamport} micro-lamports (1-1000)"
            )
        return self


class ServicesSettings(BaseModel):
    confirm_service: str = "NOZOMI"

    model_config = {"frozen": True}

    @field_validator("confirm_service")
    @classmethod
    def _known_service(cls, value: str) -> str:
        service = value.upper()
        if service not in CONFIRM_SERVICES:
            logger.warning(f"[CONFIG] Invalid confirmation service: {value}. Defaulting to NOZOMI")
            return "NOZOMI"
        return service


class FilterSettings(BaseModel):
    x_check: bool = False
    x_filter_list: list[str] = Field(default_factory=list)
    token_name_check: bool = False
    token_name_filter_list: list[str] = Field(default_factory=list)
    dev_buy_check: bool = False
    dev_buy_limit: float = 0.0  # SOL

    model_config = {"frozen": True}


class PipelineSettings(BaseModel):
    opportunity_workers: int = 8
    opportunity_queue_size: int = 256
    opportunity_timeout_sec: float = 15.0
    social_fetch_timeout_sec: float = 5.0

    model_config = {"frozen": True}


class Settings(BaseSettings):
    """Process-wide settings. Build once at startup and pass it down.

    Nested groups are read from env as GROUP__FIELD, e.g.
    FILTER__X_CHECK=true, FILTER__X_FILTER_LIST='["x.com/"]'.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    wallet: WalletSettings = WalletSettings()
    grpc: GrpcSettings = GrpcSettings()
    trade: TradeSettings = TradeSettings()
    priority_fee: PriorityFeeSettings = PriorityFeeSettings()
    services: ServicesSettings = ServicesSettings()
    filter: FilterSettings = FilterSettings()
    pipeline: PipelineSettings = PipelineSettings()

    json_logs: bool = False
    log_level: str = "INFO"

    def calculate_total_cost(self, base_amount: int) -> int:
        """Lamports spent by one buy: amount + priority fee + third party fee."""
        priority_fee_cost = self.priority_fee.cu * self.priority_fee.priority_fee_micro_lamport // 1_000_000
        third_party_fee_cost = int(self.trade.third_party_fee * LAMPORTS_PER_SOL)
        return base_amount + priority_fee_cost + third_party_fee_cost
