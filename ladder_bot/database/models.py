from sqlalchemy import Column, Integer, String, DateTime, BigInteger
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from typing import List

Base = declarative_base()

class ProfileLink(Base):
    """Links a Discord user to the aoe4world profiles they play on."""
    __tablename__ = 'profile_links'
    
    id = Column(Integer, primary_key=True)
    discord_id = Column(BigInteger, unique=True, nullable=False, index=True)
    profile_ids = Column(String(200), nullable=False)  # Comma-separated, main account first
    default_leaderboard = Column(String(20), nullable=True)
    
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    
    def get_profile_ids(self) -> List[int]:
        return [int(p) for p in self.profile_ids.split(',') if p.strip()]
    
    def set_profile_ids(self, profile_ids: List[int]):
        self.profile_ids = ','.join(str(p) for p in profile_ids)
    
    def __repr__(self):
        return f"<ProfileLink(discord_id={self.discord_id}, profile_ids='{self.profile_ids}')>"
